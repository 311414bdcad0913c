"""
SEEDi Core

Decision-support engine for selecting agricultural innovations:
context filtering, ranking, impact projection and project workflow state.
"""

__version__ = "0.1.0"
__author__ = "SEEDi Team"

from seedi.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]

"""
SEEDi Storage Layer

Persistence gateways for projects and the user profile.
"""

from seedi.storage.gateway import (
    PROFILE_KEY,
    PROJECTS_KEY,
    InMemoryGateway,
    PersistenceGateway,
    SqliteGateway,
)

__all__ = [
    "PersistenceGateway",
    "SqliteGateway",
    "InMemoryGateway",
    "PROJECTS_KEY",
    "PROFILE_KEY",
]

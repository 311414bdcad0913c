"""
SEEDi Workflow Layer

Selection toggles, project stage transitions and the session that
persists them.
"""

from seedi.workflow.session import DecisionSession
from seedi.workflow.transitions import (
    Transition,
    can_advance,
    ensure_can_advance,
    resume_route,
)

__all__ = [
    "DecisionSession",
    "Transition",
    "can_advance",
    "ensure_can_advance",
    "resume_route",
]

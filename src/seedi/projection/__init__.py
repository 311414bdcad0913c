"""
SEEDi Projection Layer

Impact projection over a selection and the action brief built from it.
"""

from seedi.projection.brief import ActionBrief, KeyIndicator, build_action_brief
from seedi.projection.projector import project_impact, round_half_away, tally_sdgs

__all__ = [
    "project_impact",
    "round_half_away",
    "tally_sdgs",
    "ActionBrief",
    "KeyIndicator",
    "build_action_brief",
]

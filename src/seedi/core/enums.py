"""
SEEDi Core Enumerations

This module defines all enumerations used throughout the SEEDi core.
String values match the JSON wire shape of catalog and project records.
"""

from enum import Enum, IntEnum


class RatingLevel(str, Enum):
    """Three-step rating used for innovation risk and scalability."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectStatus(str, Enum):
    """Lifecycle status of a decision project.

    Orthogonal to the workflow stage: completing or archiving a project
    never changes its stage.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Stage(IntEnum):
    """The four ordered workflow stages of a decision project."""

    DEFINE_CONTEXT = 1
    EXPLORE_COMPARE = 2
    ANALYZE_SIMULATE = 3
    GENERATE_ACTION = 4

    @property
    def label(self) -> str:
        """Human-readable stage name."""
        return _STAGE_LABELS[self]

    @property
    def route(self) -> str:
        """Workflow step identifier used to resume a project."""
        return _STAGE_ROUTES[self]

    @classmethod
    def last(cls) -> "Stage":
        return cls.GENERATE_ACTION


_STAGE_LABELS = {
    Stage.DEFINE_CONTEXT: "Define Context",
    Stage.EXPLORE_COMPARE: "Explore & Compare",
    Stage.ANALYZE_SIMULATE: "Analyze & Simulate",
    Stage.GENERATE_ACTION: "Generate Action",
}

_STAGE_ROUTES = {
    Stage.DEFINE_CONTEXT: "define-context",
    Stage.EXPLORE_COMPARE: "explore-compare",
    Stage.ANALYZE_SIMULATE: "analyze-simulate",
    Stage.GENERATE_ACTION: "generate-action",
}


class SortKey(str, Enum):
    """Ranking keys for the explore stage.

    Values are the camelCase field names of the innovation record so the
    presentation layer can pass them through unchanged.
    """

    IMPACT_SCORE = "impactScore"
    READINESS_LEVEL = "readinessLevel"
    ADOPTION_LEVEL = "adoptionLevel"

    @property
    def attribute(self) -> str:
        """Matching attribute name on the Innovation model."""
        return _SORT_ATTRIBUTES[self]


_SORT_ATTRIBUTES = {
    SortKey.IMPACT_SCORE: "impact_score",
    SortKey.READINESS_LEVEL: "readiness_level",
    SortKey.ADOPTION_LEVEL: "adoption_level",
}


class IndicatorTrend(str, Enum):
    """Direction shown next to a key indicator in the action brief."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

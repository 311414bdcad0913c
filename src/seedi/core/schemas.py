"""
SEEDi Core Schemas

This module defines the Pydantic models used throughout the SEEDi core.
These schemas represent the domain model and enforce invariants via validators.

Key Design Principles:
1. All schemas are immutable (frozen=True); transitions build new instances
2. JSON uses the camelCase wire shape; Python attributes stay snake_case
3. Derived values (innovation count, stage name) are computed, never stored
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from seedi.config import get_settings
from seedi.core.enums import ProjectStatus, RatingLevel, Stage

Score = Annotated[int, Field(ge=0, le=100)]
Level = Annotated[int, Field(ge=1, le=9)]
SDG = Annotated[int, Field(ge=1, le=17)]

WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def today_utc() -> date:
    """Current UTC calendar date (project date stamps are day-granular)."""
    return datetime.now(timezone.utc).date()


def new_project_id() -> str:
    """Generate a unique project identifier."""
    return uuid.uuid4().hex[:16]


# =============================================================================
# INNOVATION - Catalog Record
# =============================================================================


class Innovation(BaseModel):
    """
    A catalogued agricultural practice or technology.

    Invariants:
    - impact/feasibility/sustainability scores are within [0, 100]
    - readiness (TRL) and adoption levels are within [1, 9]
    - sdg_alignment holds unique SDG numbers (1-17), ascending
    """

    model_config = WIRE_CONFIG

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str
    category: str = Field(..., min_length=1)
    challenges: tuple[str, ...] = ()
    crop_types: tuple[str, ...] = ()
    region: str = Field(..., min_length=1, description="Target region; 'All' matches any region")
    sdg_alignment: tuple[SDG, ...] = ()

    readiness_level: Level
    adoption_level: Level
    impact_score: Score
    feasibility_score: Score
    sustainability_score: Score

    risk_level: RatingLevel
    scalability: RatingLevel

    yield_impact: int
    loss_reduction: int
    soil_health_impact: int
    income_per_ha: int

    source: str = ""
    provider: str = ""
    role_relevance: dict[str, str] = Field(default_factory=dict)

    @field_validator("sdg_alignment", mode="after")
    @classmethod
    def normalize_sdgs(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Collapse duplicates and order ascending."""
        return tuple(sorted(set(v)))

    def relevance_for(self, role: str | None) -> str | None:
        """Role-specific rationale, if the catalog provides one."""
        if not role:
            return None
        return self.role_relevance.get(role)


# =============================================================================
# USER CONTEXT & PROFILE
# =============================================================================


class UserContext(BaseModel):
    """
    Structured description of a user's farming situation.

    role, primary_objective and region are the fields needed to advance
    past stage 1; they may be blank while the user is still filling in
    the form. All other fields are advisory.
    """

    model_config = WIRE_CONFIG

    role: str = ""
    primary_objective: str = ""
    region: str = ""
    sub_region: str = ""
    agro_ecological_zone: str = ""
    primary_crop: str = ""
    budget_level: str = ""
    farm_size: str = ""
    climate_risk_level: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        if v is None:
            return ""
        return v

    @property
    def missing_required(self) -> list[str]:
        """Names of required fields that are still blank."""
        required = {
            "role": self.role,
            "primaryObjective": self.primary_objective,
            "region": self.region,
        }
        return [name for name, value in required.items() if not value]

    @property
    def is_complete(self) -> bool:
        """True when role, objective and region are all present."""
        return not self.missing_required


class UserProfile(BaseModel):
    """Onboarding profile; persists across sessions until logout."""

    model_config = WIRE_CONFIG

    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)


# =============================================================================
# DECISION PROJECT
# =============================================================================


class DecisionProject(BaseModel):
    """
    One user's end-to-end run through the four-stage workflow.

    Invariants:
    - selected_innovations holds unique IDs (duplicates collapse on load)
    - innovation_count always equals len(selected_innovations); it is
      derived on read and serialized only for wire compatibility
    - stage and status are independent: completion keeps the stage
    """

    model_config = WIRE_CONFIG

    id: str = Field(default_factory=new_project_id, min_length=1)
    title: str
    created_at: date = Field(default_factory=today_utc)
    updated_at: date = Field(default_factory=today_utc)
    current_stage: Stage = Stage.DEFINE_CONTEXT
    context: UserContext | None = None
    selected_innovations: tuple[str, ...] = ()
    status: ProjectStatus = ProjectStatus.ACTIVE

    @field_validator("selected_innovations", mode="after")
    @classmethod
    def unique_selection(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Drop repeated IDs, keeping first occurrence."""
        return tuple(dict.fromkeys(v))

    @computed_field(alias="innovationCount")  # type: ignore[prop-decorator]
    @property
    def innovation_count(self) -> int:
        return len(self.selected_innovations)

    @computed_field(alias="stageName")  # type: ignore[prop-decorator]
    @property
    def stage_name(self) -> str:
        return self.current_stage.label

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# PROJECTION
# =============================================================================


class Baseline(BaseModel):
    """Current farm indicators that a projection is measured against."""

    model_config = WIRE_CONFIG

    soil_health: Score
    water_efficiency: Score
    biodiversity_index: Score
    post_harvest_loss: Score

    @classmethod
    def from_settings(cls) -> "Baseline":
        """Build the default baseline from configuration."""
        cfg = get_settings().baseline
        return cls(
            soil_health=cfg.soil_health,
            water_efficiency=cfg.water_efficiency,
            biodiversity_index=cfg.biodiversity_index,
            post_harvest_loss=cfg.post_harvest_loss,
        )


class SDGTally(BaseModel):
    """How many selected innovations align with one SDG."""

    model_config = WIRE_CONFIG

    sdg: SDG
    count: int = Field(..., ge=1)
    total: int = Field(..., ge=1)

    @property
    def share(self) -> float:
        return self.count / self.total


class ProjectionResult(BaseModel):
    """
    Aggregated outcome estimate for a selection of innovations.

    All averages are integer means rounded half away from zero; with an
    empty selection they are 0 and every projected value equals its
    baseline input.
    """

    model_config = WIRE_CONFIG

    selected_count: int = Field(..., ge=0)

    avg_yield_impact: int
    avg_loss_reduction: int
    avg_income_per_ha: int
    avg_soil_health_impact: int
    avg_impact_score: int
    avg_feasibility_score: int
    avg_sustainability_score: int
    readiness_index: int = Field(..., ge=0, le=100)
    adoption_index: int = Field(..., ge=0, le=100)

    baseline: Baseline
    projected_loss: int
    projected_water_efficiency: int
    projected_soil_health: int
    projected_biodiversity: int

    sdg_alignment: tuple[SDGTally, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.selected_count == 0

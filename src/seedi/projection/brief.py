"""
Action Brief

Summary report produced at the "Generate Action" stage: the project's
context, headline indicators from the impact projection, the recommended
innovations and standard risk notes.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from pydantic import BaseModel, Field

from seedi.catalog.filters import role_rationale
from seedi.core.enums import IndicatorTrend
from seedi.core.schemas import (
    WIRE_CONFIG,
    DecisionProject,
    Innovation,
    ProjectionResult,
    SDGTally,
    UserContext,
)
from seedi.core.vocabulary import RISK_NOTES


class ContextItem(BaseModel):
    model_config = WIRE_CONFIG

    label: str
    value: str


class KeyIndicator(BaseModel):
    """One headline number with its display trend."""

    model_config = WIRE_CONFIG

    label: str
    value: str
    trend: IndicatorTrend = IndicatorTrend.NEUTRAL


class RecommendedInnovation(BaseModel):
    model_config = WIRE_CONFIG

    rank: int = Field(..., ge=1)
    innovation_id: str
    name: str
    category: str
    impact_score: int
    feasibility_score: int
    rationale: str | None = None


class ActionBrief(BaseModel):
    """Rendered decision brief for one project."""

    model_config = WIRE_CONFIG

    project_id: str
    title: str
    generated_on: date
    innovation_count: int
    context: tuple[ContextItem, ...] = ()
    indicators: tuple[KeyIndicator, ...] = ()
    recommendations: tuple[RecommendedInnovation, ...] = ()
    sdg_alignment: tuple[SDGTally, ...] = ()
    risk_notes: tuple[str, ...] = RISK_NOTES

    def to_markdown(self) -> str:
        """Render the brief as a Markdown document."""
        lines = [
            "# SEEDi Action Brief",
            "",
            f"**Project:** {self.title}",
            f"**Date:** {self.generated_on.isoformat()}",
            f"**Innovations:** {self.innovation_count}",
            "",
            "## Context Summary",
            "",
        ]
        if self.context:
            lines.extend(f"- **{item.label}:** {item.value}" for item in self.context)
        else:
            lines.append("- No context defined")
        lines.append("")

        lines.extend(["## Key Indicators", ""])
        lines.extend(f"- {ind.label}: {ind.value} ({ind.trend.value})" for ind in self.indicators)
        lines.append("")

        lines.extend(["## Recommended Innovations", ""])
        if not self.recommendations:
            lines.append("- No innovations selected")
        for rec in self.recommendations:
            lines.append(f"{rec.rank}. **{rec.name}** ({rec.category})")
            lines.append(f"   - Impact: {rec.impact_score}, Feasibility: {rec.feasibility_score}")
            if rec.rationale:
                lines.append(f"   - {rec.rationale}")
        lines.append("")

        if self.sdg_alignment:
            lines.extend(["## SDG Alignment", ""])
            for tally in self.sdg_alignment:
                lines.append(f"- SDG {tally.sdg}: {tally.count} of {tally.total}")
            lines.append("")

        lines.extend(["## Risk Notes", ""])
        lines.extend(f"- {note}" for note in self.risk_notes)
        lines.append("")

        return "\n".join(lines)


def _context_items(context: UserContext | None) -> tuple[ContextItem, ...]:
    if context is None:
        return ()
    items = [
        ContextItem(label="Role", value=context.role),
        ContextItem(label="Objective", value=context.primary_objective),
        ContextItem(label="Region", value=context.region),
    ]
    optional = (
        ("Crop", context.primary_crop),
        ("Agro-Ecological Zone", context.agro_ecological_zone),
        ("Budget", context.budget_level),
        ("Farm Size", context.farm_size),
        ("Climate Risk", context.climate_risk_level),
    )
    items.extend(ContextItem(label=label, value=value) for label, value in optional if value)
    return tuple(items)


def _improvement(projected: int, current: int, lower_is_better: bool = False) -> IndicatorTrend:
    delta = current - projected if lower_is_better else projected - current
    if delta > 0:
        return IndicatorTrend.POSITIVE
    if delta < 0:
        return IndicatorTrend.NEGATIVE
    return IndicatorTrend.NEUTRAL


def _indicators(projection: ProjectionResult) -> tuple[KeyIndicator, ...]:
    baseline = projection.baseline
    score_trend = IndicatorTrend.POSITIVE if not projection.is_empty else IndicatorTrend.NEUTRAL
    return (
        KeyIndicator(
            label="Impact Score", value=f"{projection.avg_impact_score}/100", trend=score_trend
        ),
        KeyIndicator(
            label="Feasibility", value=f"{projection.avg_feasibility_score}/100", trend=score_trend
        ),
        KeyIndicator(
            label="Sustainability",
            value=f"{projection.avg_sustainability_score}/100",
            trend=score_trend,
        ),
        KeyIndicator(
            label="Post-Harvest Loss",
            value=f"{projection.projected_loss}%",
            trend=_improvement(
                projection.projected_loss, baseline.post_harvest_loss, lower_is_better=True
            ),
        ),
        KeyIndicator(
            label="Soil Health",
            value=f"{projection.projected_soil_health}/100",
            trend=_improvement(projection.projected_soil_health, baseline.soil_health),
        ),
        KeyIndicator(
            label="Water Efficiency",
            value=f"{projection.projected_water_efficiency}/100",
            trend=_improvement(projection.projected_water_efficiency, baseline.water_efficiency),
        ),
        KeyIndicator(
            label="Biodiversity",
            value=f"{projection.projected_biodiversity}/100",
            trend=_improvement(projection.projected_biodiversity, baseline.biodiversity_index),
        ),
    )


def build_action_brief(
    project: DecisionProject,
    selected: Sequence[Innovation],
    projection: ProjectionResult,
) -> ActionBrief:
    """
    Assemble the action brief for a project.

    Args:
        project: The project being summarized.
        selected: Its selected innovations, in catalog order.
        projection: Result of ``project_impact`` for the same selection.
    """
    recommendations = tuple(
        RecommendedInnovation(
            rank=position,
            innovation_id=inn.id,
            name=inn.name,
            category=inn.category,
            impact_score=inn.impact_score,
            feasibility_score=inn.feasibility_score,
            rationale=role_rationale(inn, project.context),
        )
        for position, inn in enumerate(selected, start=1)
    )
    return ActionBrief(
        project_id=project.id,
        title=project.title,
        generated_on=project.updated_at,
        innovation_count=len(selected),
        context=_context_items(project.context),
        indicators=_indicators(projection),
        recommendations=recommendations,
        sdg_alignment=projection.sdg_alignment,
    )

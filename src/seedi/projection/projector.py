"""
Impact Projector

Aggregates a selection of innovations into projected outcome metrics.

Averages are integer means rounded half away from zero. Arithmetic is
done in exact fractions so that true halves (e.g. a mean of 68.5) always
round outward instead of depending on binary float representation.

Projection policy (each bound is specific to its metric):
    projected_loss             = max(2,  loss  - round(avg_loss_reduction * 0.28))
    projected_water_efficiency = min(95, water + round(avg_sustainability * 0.2))
    projected_soil_health      = min(95, soil  + avg_soil_health_impact)
    projected_biodiversity     = min(85, bio   + avg_soil_health_impact)
"""

from collections import Counter
from collections.abc import Callable, Sequence
from fractions import Fraction
import math

from seedi.core.schemas import Baseline, Innovation, ProjectionResult, SDGTally

# Post-harvest loss never drops below this (irreducible minimum, %)
LOSS_FLOOR = 2
LOSS_REDUCTION_FACTOR = Fraction("0.28")

WATER_EFFICIENCY_CEILING = 95
WATER_SUSTAINABILITY_FACTOR = Fraction("0.2")

SOIL_HEALTH_CEILING = 95
BIODIVERSITY_CEILING = 85

MAX_LEVEL = 9


def round_half_away(value: Fraction | int) -> int:
    """Round to the nearest integer, halves away from zero."""
    magnitude = math.floor(abs(Fraction(value)) + Fraction(1, 2))
    return magnitude if value >= 0 else -magnitude


def _mean(selected: Sequence[Innovation], value: Callable[[Innovation], Fraction | int]) -> int:
    if not selected:
        return 0
    total = sum((Fraction(value(inn)) for inn in selected), Fraction(0))
    return round_half_away(total / len(selected))


def tally_sdgs(selected: Sequence[Innovation]) -> tuple[SDGTally, ...]:
    """Per-SDG count of selected innovations, ascending by SDG number."""
    counts = Counter(sdg for inn in selected for sdg in set(inn.sdg_alignment))
    total = len(selected)
    return tuple(SDGTally(sdg=sdg, count=counts[sdg], total=total) for sdg in sorted(counts))


def project_impact(selected: Sequence[Innovation], baseline: Baseline) -> ProjectionResult:
    """
    Project outcome metrics for a selection against a baseline.

    Pure and deterministic. With an empty selection every average is 0
    and each projected value equals its baseline input.
    """
    avg_loss_reduction = _mean(selected, lambda i: i.loss_reduction)
    avg_soil_health_impact = _mean(selected, lambda i: i.soil_health_impact)
    avg_sustainability = _mean(selected, lambda i: i.sustainability_score)

    if selected:
        projected_loss = max(
            LOSS_FLOOR,
            baseline.post_harvest_loss
            - round_half_away(avg_loss_reduction * LOSS_REDUCTION_FACTOR),
        )
        projected_water = min(
            WATER_EFFICIENCY_CEILING,
            baseline.water_efficiency
            + round_half_away(avg_sustainability * WATER_SUSTAINABILITY_FACTOR),
        )
        projected_soil = min(SOIL_HEALTH_CEILING, baseline.soil_health + avg_soil_health_impact)
        projected_biodiversity = min(
            BIODIVERSITY_CEILING, baseline.biodiversity_index + avg_soil_health_impact
        )
    else:
        # No selection means no change, even where a baseline already sits past a bound
        projected_loss = baseline.post_harvest_loss
        projected_water = baseline.water_efficiency
        projected_soil = baseline.soil_health
        projected_biodiversity = baseline.biodiversity_index

    return ProjectionResult(
        selected_count=len(selected),
        avg_yield_impact=_mean(selected, lambda i: i.yield_impact),
        avg_loss_reduction=avg_loss_reduction,
        avg_income_per_ha=_mean(selected, lambda i: i.income_per_ha),
        avg_soil_health_impact=avg_soil_health_impact,
        avg_impact_score=_mean(selected, lambda i: i.impact_score),
        avg_feasibility_score=_mean(selected, lambda i: i.feasibility_score),
        avg_sustainability_score=avg_sustainability,
        readiness_index=_mean(
            selected, lambda i: Fraction(i.readiness_level * 100, MAX_LEVEL)
        ),
        adoption_index=_mean(selected, lambda i: Fraction(i.adoption_level * 100, MAX_LEVEL)),
        baseline=baseline,
        projected_loss=projected_loss,
        projected_water_efficiency=projected_water,
        projected_soil_health=projected_soil,
        projected_biodiversity=projected_biodiversity,
        sdg_alignment=tally_sdgs(selected),
    )

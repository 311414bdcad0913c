"""
Context Filter

Narrows the catalog to innovations relevant to a user's context.

Region is the only hard filter. Role, objective, crop, budget and the
other context fields never exclude an innovation; they only select the
advisory text shown next to it.
"""

from collections.abc import Sequence

from seedi.core.schemas import Innovation, UserContext
from seedi.core.vocabulary import WILDCARD_REGION


def matches_region(innovation: Innovation, region: str) -> bool:
    """True if the innovation targets the region or every region."""
    return innovation.region == region or innovation.region == WILDCARD_REGION


def filter_by_context(
    catalog: Sequence[Innovation], context: UserContext | None
) -> tuple[Innovation, ...]:
    """
    Innovations relevant to a context, in catalog order.

    Without a context (or with a draft context that has no region yet)
    the catalog passes through unchanged.
    """
    if context is None or not context.region:
        return tuple(catalog)
    return tuple(inn for inn in catalog if matches_region(inn, context.region))


def role_rationale(innovation: Innovation, context: UserContext | None) -> str | None:
    """Why this innovation matters for the context's role, if known."""
    if context is None:
        return None
    return innovation.relevance_for(context.role)

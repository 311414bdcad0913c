"""
Ranking Engine

Orders a candidate list for the explore stage: category filter, then
free-text filter, then a stable descending sort on the chosen key.
"""

from collections.abc import Sequence

from seedi.core.enums import SortKey
from seedi.core.schemas import Innovation
from seedi.core.vocabulary import ALL_CATEGORIES


def matches_search(innovation: Innovation, term: str) -> bool:
    """
    Case-insensitive substring match on name, description, category or
    any challenge tag. ``term`` must already be lower-cased.
    """
    fields = (innovation.name, innovation.description, innovation.category, *innovation.challenges)
    return any(term in value.lower() for value in fields)


def rank(
    innovations: Sequence[Innovation],
    key: SortKey | str = SortKey.IMPACT_SCORE,
    search_term: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Innovation]:
    """
    Filter and sort innovations for display.

    Args:
        innovations: Candidates, usually the context-filtered catalog.
        key: Field to sort on, descending.
        search_term: Free text; blank means no text filter.
        category: Exact category, or "All".

    Returns:
        A new list. Entries with equal sort values keep their input order.
        An empty list means nothing matched.
    """
    sort_key = SortKey(key)

    candidates = list(innovations)
    if category != ALL_CATEGORIES:
        candidates = [inn for inn in candidates if inn.category == category]

    # Blank input means no filter; otherwise the term is matched as typed
    if search_term.strip():
        term = search_term.lower()
        candidates = [inn for inn in candidates if matches_search(inn, term)]

    attribute = sort_key.attribute
    # sorted() is stable, so negating the key keeps ties in input order
    return sorted(candidates, key=lambda inn: -getattr(inn, attribute))

"""
Selection Set

Toggle semantics over a project's tuple of selected innovation IDs.
Display order is never taken from here; callers re-derive it from the
catalog.
"""


def contains(selected: tuple[str, ...], innovation_id: str) -> bool:
    return innovation_id in selected


def toggle(selected: tuple[str, ...], innovation_id: str) -> tuple[str, ...]:
    """Remove the ID if present, otherwise add it. Two toggles cancel out."""
    if innovation_id in selected:
        return tuple(i for i in selected if i != innovation_id)
    return (*selected, innovation_id)

"""
Catalog Store

Holds the immutable innovation catalog for the lifetime of a session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from seedi.catalog.source import BundledCatalogSource, CatalogSource, source_from_settings
from seedi.core.exceptions import CatalogSourceError, LoadError
from seedi.core.schemas import Innovation
from seedi.observability import get_tracer

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Read-only catalog of innovations.

    Every record is validated when the store is built; a single malformed
    record, missing field or duplicate ID raises LoadError and no store
    is created. Catalog order is the order of the source.

    Usage:
        store = CatalogStore.from_source(BundledCatalogSource())
        for innovation in store.get_all():
            ...
    """

    def __init__(self, records: Iterable[Innovation | Mapping[str, Any]]) -> None:
        innovations: list[Innovation] = []
        errors: list[dict[str, Any]] = []

        for index, record in enumerate(records):
            if isinstance(record, Innovation):
                innovations.append(record)
                continue
            try:
                innovations.append(Innovation.model_validate(record))
            except PydanticValidationError as e:
                errors.append(
                    {
                        "index": index,
                        "id": record.get("id") if isinstance(record, Mapping) else None,
                        "errors": [
                            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                            for err in e.errors()
                        ],
                    }
                )

        if errors:
            raise LoadError(
                f"Catalog has {len(errors)} invalid record(s)", {"invalid_records": errors}
            )

        by_id: dict[str, Innovation] = {}
        duplicates: list[str] = []
        for innovation in innovations:
            if innovation.id in by_id:
                duplicates.append(innovation.id)
            by_id[innovation.id] = innovation
        if duplicates:
            raise LoadError("Catalog has duplicate innovation IDs", {"duplicate_ids": duplicates})

        self._innovations: tuple[Innovation, ...] = tuple(innovations)
        self._by_id = by_id
        self._position = {inn.id: i for i, inn in enumerate(self._innovations)}

    @classmethod
    def from_source(cls, source: CatalogSource) -> "CatalogStore":
        """Fetch and validate the catalog from a source."""
        tracer = get_tracer("seedi.catalog")
        with tracer.span("load", attributes={"source": source.name}) as span:
            try:
                records = source.fetch()
            except CatalogSourceError:
                raise
            except Exception as e:
                raise LoadError(f"Catalog source '{source.name}' failed: {e}") from e
            store = cls(records)
            span.set_attribute("innovation_count", len(store))

        logger.info("Loaded %d innovations from %s", len(store), source.name)
        return store

    @classmethod
    def bundled(cls) -> "CatalogStore":
        """Store backed by the catalog shipped with the package."""
        return cls.from_source(BundledCatalogSource())

    @classmethod
    def from_settings(cls) -> "CatalogStore":
        """Store backed by the configured catalog source."""
        return cls.from_source(source_from_settings())

    def __len__(self) -> int:
        return len(self._innovations)

    def __contains__(self, innovation_id: object) -> bool:
        return innovation_id in self._by_id

    def get_all(self) -> tuple[Innovation, ...]:
        """The full catalog, in source order."""
        return self._innovations

    def get(self, innovation_id: str) -> Innovation | None:
        """Look up one innovation; None when the ID is unknown."""
        return self._by_id.get(innovation_id)

    def get_many(self, innovation_ids: Sequence[str] | set[str]) -> tuple[Innovation, ...]:
        """
        Innovations for the given IDs in catalog order.

        Unknown IDs are skipped. Selection sets carry no meaningful order,
        so display order is always re-derived from the catalog here.
        """
        known = [i for i in set(innovation_ids) if i in self._position]
        known.sort(key=self._position.__getitem__)
        return tuple(self._by_id[i] for i in known)

    def categories(self) -> tuple[str, ...]:
        """Distinct categories, first-seen order."""
        return tuple(dict.fromkeys(inn.category for inn in self._innovations))

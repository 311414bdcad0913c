"""
Knowledge Base Query Surface

Read-only, paginated search over raw agricultural-innovation knowledge
base records. Source fields are comma-delimited strings; every filter is
a case-insensitive substring match on them.

The taxonomy and data source exports that ship alongside the records are
loaded here too; they are served as-is, with an optional vocabulary filter
for taxonomy terms.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from seedi.core.exceptions import LoadError


class _ExportRecord(BaseModel):
    """Common handling for records exported by the knowledge base."""

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("*", mode="before")
    @classmethod
    def blank_nulls(cls, v: Any) -> Any:
        """Exports use null for empty fields and sometimes bare numbers for text."""
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class KnowledgeBaseRecord(_ExportRecord):
    """
    One knowledge base entry as exported by the source system.

    Only the fields the query surface reads are declared; anything else
    is preserved untouched.
    """

    id: str = Field(..., min_length=1)
    title: str = ""
    short_description: str = ""
    long_description: str = ""
    type: str = ""
    use_cases: str = ""
    readiness_level: str = ""
    adoption_level: str = ""
    region: str = ""
    countries_adoption: str = ""
    country_origin: str = ""
    impact_sdgs: str = ""

    @property
    def summary(self) -> str:
        """Short description, falling back to the first 200 chars of the long one."""
        return self.short_description or self.long_description[:200]


class TaxonomyTerm(_ExportRecord):
    """A term from one of the knowledge base's controlled vocabularies."""

    id: str = Field(..., min_length=1)
    vocabulary: str = ""
    name: str = ""
    value: str = ""
    description: str = ""
    description_ai: str = ""
    counter: str = ""
    depth: str = ""
    weight: str = ""


class DataSource(_ExportRecord):
    """An organisation or dataset the knowledge base draws records from."""

    nid: str = Field(..., min_length=1)
    title: str = ""
    body: str = ""
    field_use_cases_description: str = ""


@dataclass(frozen=True)
class KnowledgeBaseFilters:
    """Optional substring filters; blank values are ignored."""

    search: str | None = None
    type: str | None = None
    use_case: str | None = None
    readiness_level: str | None = None
    adoption_level: str | None = None
    region: str | None = None
    country: str | None = None
    sdg: str | None = None

    def active(self) -> dict[str, str]:
        """Filters with a non-blank value, lower-cased."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {name: value.lower() for name, value in values.items() if value}


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class Page:
    """One page of query results."""

    data: list[KnowledgeBaseRecord]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [record.model_dump() for record in self.data],
            "pagination": self.pagination.to_dict(),
        }


@dataclass
class KnowledgeBaseStats:
    """Distinct-value counts across the knowledge base."""

    total_innovations: int = 0
    types: set[str] = field(default_factory=set)
    use_cases: set[str] = field(default_factory=set)
    countries: set[str] = field(default_factory=set)
    regions: set[str] = field(default_factory=set)
    sdgs: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, int]:
        return {
            "totalInnovations": self.total_innovations,
            "totalTypes": len(self.types),
            "totalUseCases": len(self.use_cases),
            "totalCountries": len(self.countries),
            "totalRegions": len(self.regions),
            "totalSdgs": len(self.sdgs),
        }


# Which record fields each filter inspects
_FILTER_FIELDS: dict[str, tuple[str, ...]] = {
    "search": ("title", "short_description", "long_description"),
    "type": ("type",),
    "use_case": ("use_cases",),
    "readiness_level": ("readiness_level",),
    "adoption_level": ("adoption_level",),
    "region": ("region",),
    "country": ("countries_adoption", "country_origin"),
    "sdg": ("impact_sdgs",),
}


def _read_array(path: Path, kind: str) -> list[Any]:
    """Decode one export file, which must hold a JSON array."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise LoadError(f"Cannot read {kind} file {path}: {e}", {"path": str(path)}) from e
    if not isinstance(payload, list):
        raise LoadError(f"{kind.capitalize()} file {path} is not a JSON array", {"path": str(path)})
    return payload


def load_knowledge_base(paths: Iterable[Path]) -> list[KnowledgeBaseRecord]:
    """
    Load and merge knowledge base export files.

    Each file holds a JSON array. Records are de-duplicated by ID; the
    first occurrence wins.
    """
    raw: list[Any] = []
    for path in paths:
        raw.extend(_read_array(path, "knowledge base"))

    try:
        return dedupe_records(raw)
    except PydanticValidationError as e:
        raise LoadError(f"Knowledge base has invalid records: {e.error_count()} error(s)") from e


def load_taxonomy(path: Path) -> list[TaxonomyTerm]:
    """Load the taxonomy terms export, in file order."""
    try:
        return [TaxonomyTerm.model_validate(item) for item in _read_array(path, "taxonomy")]
    except PydanticValidationError as e:
        raise LoadError(f"Taxonomy has invalid terms: {e.error_count()} error(s)") from e


def load_data_sources(path: Path) -> list[DataSource]:
    """Load the data sources export, in file order."""
    try:
        return [DataSource.model_validate(item) for item in _read_array(path, "data sources")]
    except PydanticValidationError as e:
        raise LoadError(f"Data sources have invalid entries: {e.error_count()} error(s)") from e


def get_taxonomy(terms: Sequence[TaxonomyTerm], vocabulary: str | None = None) -> list[TaxonomyTerm]:
    """All terms, or only those of one vocabulary (exact, case-sensitive match)."""
    if not vocabulary:
        return list(terms)
    return [term for term in terms if term.vocabulary == vocabulary]


def dedupe_records(raw: Iterable[Any]) -> list[KnowledgeBaseRecord]:
    """Validate raw entries and keep the first record for each ID."""
    seen: dict[str, KnowledgeBaseRecord] = {}
    for item in raw:
        record = item if isinstance(item, KnowledgeBaseRecord) else KnowledgeBaseRecord.model_validate(item)
        seen.setdefault(record.id, record)
    return list(seen.values())


def _matches(record: KnowledgeBaseRecord, filter_name: str, needle: str) -> bool:
    return any(needle in getattr(record, attr).lower() for attr in _FILTER_FIELDS[filter_name])


def query(
    records: Sequence[KnowledgeBaseRecord],
    filters: KnowledgeBaseFilters | None = None,
    page: int = 1,
    limit: int = 20,
) -> Page:
    """
    Filter and paginate knowledge base records.

    All active filters must match. Pages are 1-based; a page past the end
    returns no data but still reports the totals.
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    matched = list(records)
    for name, needle in (filters or KnowledgeBaseFilters()).active().items():
        matched = [r for r in matched if _matches(r, name, needle)]

    total = len(matched)
    start = (page - 1) * limit
    return Page(
        data=matched[start : start + limit],
        pagination=Pagination(
            page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)
        ),
    )


def get_by_id(records: Sequence[KnowledgeBaseRecord], record_id: str) -> KnowledgeBaseRecord | None:
    """Find a record by ID; None if absent."""
    return next((r for r in records if r.id == record_id), None)


def _split(value: str) -> set[str]:
    return {part.strip() for part in value.split(",") if part.strip()}


def stats(records: Sequence[KnowledgeBaseRecord]) -> KnowledgeBaseStats:
    """Count distinct types, use cases, countries, regions and SDGs."""
    result = KnowledgeBaseStats(total_innovations=len(records))
    for record in records:
        result.types |= _split(record.type)
        result.use_cases |= _split(record.use_cases)
        result.countries |= _split(record.countries_adoption)
        result.regions |= _split(record.region)
        result.sdgs |= _split(record.impact_sdgs)
    return result

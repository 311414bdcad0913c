"""
SEEDi Core

Domain enums, schemas, exceptions and reference vocabularies.

The vocabularies are the option lists a presentation layer offers when a
user fills in their context or filters by category.
"""

from seedi.core.vocabulary import (
    ALL_CATEGORIES,
    CATEGORIES,
    CONTEXT_OPTIONS,
    RISK_NOTES,
    WILDCARD_REGION,
)

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "CONTEXT_OPTIONS",
    "RISK_NOTES",
    "WILDCARD_REGION",
]

"""Field reconciliation engine: normalize, extract, collect, reconcile, migrate, suggest, merge."""

from __future__ import annotations

from .contracts import (
    CatalogSuggestion,
    CollisionWarning,
    EntityAnalysis,
    FieldInput,
    MatchKind,
    MatchResult,
    MergeResult,
    MigrationResult,
    MissingFieldsReport,
    ReconciliationReport,
    RenamedKey,
    Requirement,
    RequirementMap,
    Suggestion,
    TemplateGap,
    TemplateValidation,
    UpsertResult,
    percentage,
)
from .engine import FieldReconciliationEngine
from .extract import DEFAULT_STANDARD_FIELDS, ExtractedField, FieldExtractor, FieldMap
from .merge import MergeEngine
from .migrate import MigrationEngine, pick_survivor
from .normalize import (
    DEFAULT_NORMALIZER,
    NameNormalizer,
    compact_field_name,
    normalize_field_name,
)
from .reconcile import FieldMatcher, ReconciliationEngine
from .requirements import RequirementCollector
from .suggest import CatalogEntry, SuggestionEngine
from .upsert import is_valid_value, upsert_fields

__all__ = [
    "DEFAULT_NORMALIZER",
    "DEFAULT_STANDARD_FIELDS",
    "CatalogEntry",
    "CatalogSuggestion",
    "CollisionWarning",
    "EntityAnalysis",
    "ExtractedField",
    "FieldExtractor",
    "FieldInput",
    "FieldMap",
    "FieldMatcher",
    "FieldReconciliationEngine",
    "MatchKind",
    "MatchResult",
    "MergeEngine",
    "MergeResult",
    "MigrationEngine",
    "MigrationResult",
    "MissingFieldsReport",
    "NameNormalizer",
    "ReconciliationEngine",
    "ReconciliationReport",
    "RenamedKey",
    "Requirement",
    "RequirementCollector",
    "RequirementMap",
    "Suggestion",
    "SuggestionEngine",
    "TemplateGap",
    "TemplateValidation",
    "UpsertResult",
    "compact_field_name",
    "is_valid_value",
    "normalize_field_name",
    "percentage",
    "pick_survivor",
    "upsert_fields",
]

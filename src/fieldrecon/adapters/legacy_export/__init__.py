"""Import adapter for legacy JSON exports."""

from __future__ import annotations

from .schema import LegacyExportDocument, TemplatePayload, ThirdPartyPayload
from .translator import (
    LegacyExport,
    legacy_uuid,
    parse_export,
    parse_template,
    parse_third_party,
    read_export_file,
)

__all__ = [
    "LegacyExport",
    "LegacyExportDocument",
    "TemplatePayload",
    "ThirdPartyPayload",
    "legacy_uuid",
    "parse_export",
    "parse_template",
    "parse_third_party",
    "read_export_file",
]

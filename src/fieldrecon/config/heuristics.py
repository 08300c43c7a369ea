"""Loader for the data-driven heuristic tables (stop words, aliases, type hints...).

The packaged ``heuristics.toml`` ships the defaults. Operators extend coverage by
pointing ``FIELDRECON_HEURISTICS_FILE`` at their own copy; the file replaces the
defaults wholesale, it is not merged.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Final, cast

from .errors import ConfigurationError

HEURISTICS_FILE_ENV: Final[str] = "FIELDRECON_HEURISTICS_FILE"
DEFAULT_HEURISTICS_RESOURCE: Final[str] = "heuristics.toml"

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommonFieldSpec:
    name: str
    label: str
    value_type: str = "text"
    options: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class HeuristicsConfig:
    """Tables consumed by the normalizer, extractor, migration and suggestion stages."""

    stop_words: frozenset[str] = frozenset()
    separators: tuple[str, ...] = ("_", "/", "-", ".")
    standard_fields: dict[str, str] = field(default_factory=dict[str, str])
    aliases: dict[str, str] = field(default_factory=dict[str, str])
    type_hints: dict[str, str] = field(default_factory=dict[str, str])
    common_fields: dict[str, tuple[CommonFieldSpec, ...]] = field(
        default_factory=dict[str, tuple[CommonFieldSpec, ...]]
    )


def load_heuristics(path: Path | None = None) -> HeuristicsConfig:
    """Parse a heuristics TOML document; ``None`` loads the packaged defaults."""

    try:
        if path is None:
            resource = resources.files(__package__ or "fieldrecon.config").joinpath(
                DEFAULT_HEURISTICS_RESOURCE
            )
            document = tomllib.loads(resource.read_text(encoding="utf-8"))
        else:
            with path.open("rb") as handle:
                document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Heuristics file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid heuristics file {path}: {exc}") from exc

    log.debug("Loaded heuristics from %s", path or DEFAULT_HEURISTICS_RESOURCE)
    return _parse_document(document)


def get_heuristics_config() -> HeuristicsConfig:
    env_path = os.getenv(HEURISTICS_FILE_ENV)
    if env_path and env_path.strip():
        return load_heuristics(Path(env_path.strip()).expanduser())
    return load_heuristics()


def _parse_document(document: dict[str, Any]) -> HeuristicsConfig:
    stop_words = _string_list(document.get("stop_words", []), "stop_words")
    separators = _string_list(document.get("separators", ["_", "/", "-", "."]), "separators")
    for separator in separators:
        if len(separator) != 1:
            raise ConfigurationError(f"Separators must be single characters, got {separator!r}")

    common_fields: dict[str, tuple[CommonFieldSpec, ...]] = {}
    raw_common = _table(document.get("common_fields", {}), "common_fields")
    for type_code, entries in raw_common.items():
        if not isinstance(entries, list):
            raise ConfigurationError(f"common_fields.{type_code} must be an array of tables")
        specs: list[CommonFieldSpec] = []
        for entry in cast(list[object], entries):
            specs.append(_common_field(entry, type_code))
        common_fields[type_code] = tuple(specs)

    return HeuristicsConfig(
        stop_words=frozenset(word.strip().lower() for word in stop_words if word.strip()),
        separators=tuple(separators),
        standard_fields=_string_table(document.get("standard_fields", {}), "standard_fields"),
        aliases=_string_table(document.get("aliases", {}), "aliases"),
        type_hints=_string_table(document.get("type_hints", {}), "type_hints"),
        common_fields=common_fields,
    )


def _common_field(entry: object, type_code: str) -> CommonFieldSpec:
    table = _table(entry, f"common_fields.{type_code}")
    name = table.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"common_fields.{type_code} entries need a non-empty name")
    label = table.get("label", name)
    value_type = table.get("type", "text")
    options = _string_list(table.get("options", []), f"common_fields.{type_code}.options")
    if not isinstance(label, str) or not isinstance(value_type, str):
        raise ConfigurationError(f"common_fields.{type_code}.{name} has non-string label/type")
    return CommonFieldSpec(name=name, label=label, value_type=value_type, options=tuple(options))


def _table(value: object, name: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{name} must be a table")
    return cast(dict[str, object], value)


def _string_table(value: object, name: str) -> dict[str, str]:
    table = _table(value, name)
    result: dict[str, str] = {}
    for key, item in table.items():
        if not isinstance(item, str) or not item.strip():
            raise ConfigurationError(f"{name}.{key} must be a non-empty string")
        result[key] = item
    return result


def _string_list(value: object, name: str) -> list[str]:
    if not isinstance(value, list):
        raise ConfigurationError(f"{name} must be an array of strings")
    items = cast(list[object], value)
    if not all(isinstance(item, str) for item in items):
        raise ConfigurationError(f"{name} must be an array of strings")
    return cast(list[str], items)

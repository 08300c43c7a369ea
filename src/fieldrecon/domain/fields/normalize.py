"""Field-name canonicalization.

Two forms are produced from an arbitrary label:

- ``normalize``: the canonical key (accent-free, lowercase, single-underscore
  separated, stop-word tokens removed). Used for storage keys, so it stays readable.
- ``compact``: the strict matching token, i.e. the canonical key with every
  separator removed. Used only as the last matching tier.

Both are total functions: falsy or non-string input yields ``""``.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Final

DEFAULT_STOP_WORDS: Final[frozenset[str]] = frozenset({"de", "del", "la", "el"})
DEFAULT_SEPARATORS: Final[tuple[str, ...]] = ("_", "/", "-", ".")


def _separator_pattern(separators: tuple[str, ...]) -> re.Pattern[str]:
    escaped = "".join(re.escape(separator) for separator in separators)
    return re.compile(rf"[\s{escaped}]+")


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@dataclass(frozen=True, slots=True, kw_only=True)
class NameNormalizer:
    """Configurable label -> canonical key function."""

    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    separators: tuple[str, ...] = DEFAULT_SEPARATORS
    _pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_pattern", _separator_pattern(self.separators))
        # tokens are compared accent-free, so stop words must be too
        folded = frozenset(_strip_marks(_strip_marks(word).lower()) for word in self.stop_words)
        object.__setattr__(self, "stop_words", folded)

    def normalize(self, label: object) -> str:
        if not label or not isinstance(label, str):
            return ""
        text = _strip_marks(label)
        # lowercasing can reintroduce combining marks (U+0130 -> i + U+0307)
        text = _strip_marks(text.lower()).strip()
        text = self._pattern.sub("_", text)
        text = re.sub(r"_+", "_", text).strip("_")
        if not text:
            return ""
        return "_".join(self._content_tokens(text.split("_")))

    def compact(self, label: object) -> str:
        return self.normalize(label).replace("_", "")

    def _content_tokens(self, tokens: list[str]) -> list[str]:
        kept = [token for token in tokens if token not in self.stop_words]
        return kept or tokens


DEFAULT_NORMALIZER: Final[NameNormalizer] = NameNormalizer()


def normalize_field_name(label: object) -> str:
    """Canonical key for ``label`` using the default tables."""

    return DEFAULT_NORMALIZER.normalize(label)


def compact_field_name(label: object) -> str:
    """Strict, separator-free matching token for ``label`` using the default tables."""

    return DEFAULT_NORMALIZER.compact(label)

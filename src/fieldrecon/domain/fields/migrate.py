"""Rewrite free-form attribute keys to their canonical form.

Collision policy: when several original keys share one canonical key, exactly one
value survives and the others are reported in a :class:`CollisionWarning`. The
survivor is, in order of preference:

1. the key that is already in canonical form, if its value is not blank;
2. the first key (in map order) with a non-blank value;
3. the first key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model import is_blank

from .contracts import CollisionWarning, MigrationResult, RenamedKey
from .normalize import DEFAULT_NORMALIZER, NameNormalizer

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from fieldrecon.domain.model import AttributeMap, AttributeValue

log = logging.getLogger(__name__)

type _Entry = tuple[str, AttributeValue]


def pick_survivor(canonical_key: str, entries: Sequence[_Entry]) -> int:
    """Index of the entry that keeps its value when ``entries`` collide."""

    for index, (key, value) in enumerate(entries):
        if key == canonical_key and not is_blank(value):
            return index
    for index, (_, value) in enumerate(entries):
        if not is_blank(value):
            return index
    return 0


@dataclass(frozen=True, slots=True, kw_only=True)
class MigrationEngine:
    normalizer: NameNormalizer = DEFAULT_NORMALIZER
    aliases: Mapping[str, str] = field(default_factory=dict[str, str])
    _alias_index: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_alias_index", self._index_aliases())

    def canonical_key(self, key: str, *, apply_aliases: bool = False) -> str:
        canonical = self.normalizer.normalize(key)
        if apply_aliases and canonical:
            return self._alias_index.get(canonical, canonical)
        return canonical

    def migrate(self, attributes: AttributeMap, *, apply_aliases: bool = False) -> MigrationResult:
        groups: dict[str, list[_Entry]] = {}
        for key, value in attributes.items():
            canonical = self.canonical_key(key, apply_aliases=apply_aliases)
            if not canonical:
                log.debug("Attribute key %r has no canonical form; leaving it in place", key)
                canonical = key
            groups.setdefault(canonical, []).append((key, value))

        result = MigrationResult(attributes={})
        for canonical, entries in groups.items():
            collided = len(entries) > 1
            for key, value in entries:
                if key != canonical:
                    result.diff.append(
                        RenamedKey(old_key=key, new_key=canonical, value=value, collided=collided)
                    )
            survivor = pick_survivor(canonical, entries) if collided else 0
            kept_key, kept_value = entries[survivor]
            result.attributes[canonical] = kept_value
            if collided:
                warning = CollisionWarning(
                    canonical_key=canonical,
                    kept_key=kept_key,
                    kept_value=kept_value,
                    dropped=tuple(
                        entry for index, entry in enumerate(entries) if index != survivor
                    ),
                )
                log.warning(
                    "Keys %s all normalize to %r; keeping the value of %r",
                    ", ".join(repr(key) for key, _ in entries),
                    canonical,
                    kept_key,
                )
                result.collisions.append(warning)
        return result

    def _index_aliases(self) -> dict[str, str]:
        index: dict[str, str] = {}
        for label, target in self.aliases.items():
            source = self.normalizer.normalize(label)
            if not source:
                raise ValidationError(f"Alias label {label!r} normalizes to nothing", keys=[label])
            if self.normalizer.normalize(target) != target:
                raise ValidationError(
                    f"Alias target {target!r} for {label!r} is not a canonical key",
                    keys=[label],
                )
            previous = index.get(source)
            if previous is not None and previous != target:
                raise ValidationError(
                    f"Alias label {label!r} maps {source!r} to both {previous!r} and {target!r}",
                    keys=[label],
                )
            index[source] = target
        for source, target in index.items():
            chained = index.get(target, target)
            if chained != target:
                raise ValidationError(
                    f"Alias target {target!r} is itself an alias of {chained!r}",
                    keys=[source],
                )
        return index

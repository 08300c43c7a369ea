"""Consolidate several attribute keys that describe one concept into a single key."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model import attribute_value, is_blank

from .contracts import MergeResult
from .normalize import DEFAULT_NORMALIZER, NameNormalizer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fieldrecon.domain.model import AttributeMap, AttributeValue

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeEngine:
    normalizer: NameNormalizer = DEFAULT_NORMALIZER

    def merge(
        self,
        attributes: AttributeMap,
        keys: Sequence[str],
        target_name: str,
        *,
        remove_originals: bool = True,
        target_value: object = None,
    ) -> MergeResult:
        """Write one value under the canonical ``target_name``.

        The value is ``target_value`` when given, otherwise the first non-blank value
        among ``keys`` in the order supplied. With ``remove_originals`` every merged key
        other than the target itself is deleted.
        A value already stored under the target key that was not among ``keys`` is
        replaced and reported as ``overwritten``.
        """
        merged_keys = tuple(dict.fromkeys(keys))
        if len(merged_keys) < 2:
            raise ValidationError("At least two distinct fields are required to merge", keys=keys)
        target_key = self.normalizer.normalize(target_name)
        if not target_key:
            raise ValidationError("A target field name is required", keys=merged_keys)
        absent = [key for key in merged_keys if key not in attributes]
        if absent:
            raise ValidationError(
                f"Fields not found on the record: {', '.join(absent)}", keys=absent
            )

        if target_value is not None:
            value = attribute_value(target_value)
        else:
            value = next(
                (attributes[key] for key in merged_keys if not is_blank(attributes[key])),
                attributes[merged_keys[0]],
            )

        overwritten: AttributeValue | None = None
        if target_key in attributes and target_key not in merged_keys:
            overwritten = attributes[target_key]
            log.warning(
                "Merge target %r already holds %r; replacing it with the merged value",
                target_key,
                overwritten,
            )

        merged = dict(attributes)
        merged[target_key] = value
        removed: tuple[str, ...] = ()
        if remove_originals:
            removed = tuple(key for key in merged_keys if key != target_key)
            for key in removed:
                del merged[key]
        log.debug("Merged %s into %r", ", ".join(map(repr, merged_keys)), target_key)
        return MergeResult(
            attributes=merged,
            target_key=target_key,
            value=value,
            merged_keys=merged_keys,
            removed_keys=removed,
            overwritten=overwritten,
        )

    def matching_keys(self, attributes: AttributeMap, raw_names: Sequence[str]) -> list[str]:
        """Keys of ``attributes`` whose canonical form is one of ``raw_names``'.

        Ordered by the position of the name they matched in ``raw_names``, then by map
        order.
        """
        wanted = [name for name in dict.fromkeys(map(self.normalizer.normalize, raw_names)) if name]
        by_name: dict[str, list[str]] = {name: [] for name in wanted}
        for key in attributes:
            canonical = self.normalizer.normalize(key)
            if canonical in by_name:
                by_name[canonical].append(key)
        return [key for name in wanted for key in by_name[name]]

    def merge_matching(
        self,
        attributes: AttributeMap,
        raw_names: Sequence[str],
        target_name: str,
        *,
        remove_originals: bool = True,
    ) -> MergeResult | None:
        """Bulk form for one record; ``None`` when fewer than two keys match."""
        keys = self.matching_keys(attributes, raw_names)
        if len(keys) < 2:
            return None
        return self.merge(attributes, keys, target_name, remove_originals=remove_originals)


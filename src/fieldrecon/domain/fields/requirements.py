"""Aggregate template field declarations into one requirement set per third-party type."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrecon.domain.model import FieldType

from .contracts import Requirement, RequirementMap
from .normalize import DEFAULT_NORMALIZER, NameNormalizer

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from fieldrecon.domain.model import ContractTemplate, TemplateField

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class RequirementCollector:
    """Deduplicate template fields by canonical name, OR-ing the mandatory flag.

    Templates are visited in ``(name, id)`` order, so the resulting map (its order,
    labels and provenance lists included) does not depend on how the repository
    returned them.
    """

    normalizer: NameNormalizer = DEFAULT_NORMALIZER
    type_hints: Mapping[str, str] = field(default_factory=dict[str, str])

    def collect(
        self, third_party_type: str, templates: Iterable[ContractTemplate]
    ) -> RequirementMap:
        relevant = sorted(
            (template for template in templates if template.declares_fields_for(third_party_type)),
            key=lambda template: (template.name, str(template.id)),
        )
        requirements = self._aggregate(relevant)
        log.debug(
            "Collected %d requirements for type %r from %d templates",
            len(requirements),
            third_party_type,
            len(relevant),
        )
        return requirements

    def collect_template(self, template: ContractTemplate) -> RequirementMap:
        """Requirements of a single template, whatever its type or status."""
        return self._aggregate([template])

    def _aggregate(self, relevant: list[ContractTemplate]) -> RequirementMap:
        requirements: RequirementMap = {}
        declared_types: set[str] = set()
        for template in relevant:
            for template_field in template.fields:
                canonical_name = self.normalizer.normalize(template_field.name)
                if not canonical_name:
                    log.debug(
                        "Template %s declares a field with an empty name; ignoring",
                        template.id,
                    )
                    continue
                requirement = requirements.get(canonical_name)
                if requirement is None:
                    requirements[canonical_name] = Requirement(
                        canonical_name=canonical_name,
                        label=template_field.display_label,
                        value_type=self._value_type(canonical_name, template_field),
                        mandatory=template_field.mandatory,
                        source_templates=[template.id],
                        template_names=[template.name],
                    )
                    if template_field.value_type is not None:
                        declared_types.add(canonical_name)
                    continue

                requirement.mandatory = requirement.mandatory or template_field.mandatory
                if template.id not in requirement.source_templates:
                    requirement.source_templates.append(template.id)
                    requirement.template_names.append(template.name)
                if canonical_name not in declared_types and template_field.value_type is not None:
                    requirement.value_type = template_field.value_type
                    declared_types.add(canonical_name)

        return requirements

    def _value_type(self, canonical_name: str, template_field: TemplateField) -> FieldType:
        if template_field.value_type is not None:
            return template_field.value_type
        return FieldType.coerce(self.type_hints.get(canonical_name))

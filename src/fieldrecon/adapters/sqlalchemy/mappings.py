"""SQLAlchemy mapping metadata for third parties and contract templates."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from fieldrecon.domain.model import (
    STANDARD_ATTRIBUTES,
    AttributeMap,
    ContractTemplate,
    FieldType,
    TemplateField,
    ThirdParty,
    from_tagged,
    to_tagged,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class AttributeMapType(TypeDecorator[AttributeMap]):
    """Attribute map as a JSON object of ``{"kind": ..., "value": ...}`` entries."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: AttributeMap | None, dialect: Dialect) -> str:
        _ = dialect
        if not value:
            return "{}"
        return json.dumps({key: to_tagged(item) for key, item in value.items()})

    def process_result_value(self, value: str | None, dialect: Dialect) -> AttributeMap:
        _ = dialect
        if not value:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            log.warning("Discarding non-object attribute payload: %r", value[:80])
            return {}
        payload = cast(dict[str, Any], loaded)
        return {key: from_tagged(item) for key, item in payload.items()}


class TemplateFieldsType(TypeDecorator[list[TemplateField]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[TemplateField] | None, dialect: Dialect) -> str:
        _ = dialect
        payload = [
            {
                "name": item.name,
                "label": item.label,
                "value_type": item.value_type.value if item.value_type else None,
                "mandatory": item.mandatory,
            }
            for item in value or []
        ]
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[TemplateField]:
        _ = dialect
        if not value:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        fields: list[TemplateField] = []
        for item in cast(list[dict[str, Any]], loaded):
            value_type = item.get("value_type")
            fields.append(
                TemplateField(
                    name=str(item["name"]),
                    label=item.get("label"),
                    value_type=FieldType(value_type) if value_type else None,
                    mandatory=bool(item.get("mandatory", False)),
                )
            )
        return fields


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

third_party_table = Table(
    "third_party",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("company_id", String(64), nullable=False),
    Column("third_party_type", String(64), nullable=True),
    *(Column(attribute, String, nullable=True) for attribute in STANDARD_ATTRIBUTES),
    Column("attributes", AttributeMapType, nullable=False, default=dict),
    Column("active", Boolean, nullable=False, default=True),
    Column("updated_by", String, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
    Column("version", Integer, nullable=False),
    Index(None, "company_id", "third_party_type"),
)

contract_template_table = Table(
    "contract_template",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("company_id", String(64), nullable=False),
    Column("name", String, nullable=False),
    Column("third_party_type", String(64), nullable=True),
    Column("category", String, nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    Column("fields", TemplateFieldsType, nullable=False, default=list),
    Index(None, "company_id", "third_party_type"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        ThirdParty,
        third_party_table,
        version_id_col=third_party_table.c.version,
    )

    mapper_registry.map_imperatively(
        ContractTemplate,
        contract_template_table,
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)

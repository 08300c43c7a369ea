"""SQLAlchemy adapter package for fieldrecon."""

from __future__ import annotations

from .mappings import (
    contract_template_table,
    create_all_tables,
    mapper_registry,
    start_mappers,
    third_party_table,
)
from .repositories import SqlAlchemyTemplateRepository, SqlAlchemyThirdPartyRepository

__all__ = [
    "SqlAlchemyTemplateRepository",
    "SqlAlchemyThirdPartyRepository",
    "contract_template_table",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
    "third_party_table",
]

"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from fieldrecon.adapters.sqlalchemy.mappings import contract_template_table, third_party_table
from fieldrecon.domain.model import ContractTemplate, ThirdParty

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session


class SqlAlchemyThirdPartyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ThirdParty) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> ThirdParty | None:
        return self.session.get(ThirdParty, entity_id)

    def find_by_type_and_company(
        self, third_party_type: str, company_id: str, *, limit: int | None = None
    ) -> list[ThirdParty]:
        stmt = (
            select(ThirdParty)
            .where(third_party_table.c.company_id == company_id)
            .where(third_party_table.c.third_party_type == third_party_type)
            .where(third_party_table.c.active.is_(True))
            .order_by(*self._ordering())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def find_by_company(
        self, company_id: str, *, third_party_type: str | None = None, active_only: bool = True
    ) -> list[ThirdParty]:
        stmt = select(ThirdParty).where(third_party_table.c.company_id == company_id)
        if third_party_type is not None:
            stmt = stmt.where(third_party_table.c.third_party_type == third_party_type)
        if active_only:
            stmt = stmt.where(third_party_table.c.active.is_(True))
        return list(self.session.execute(stmt.order_by(*self._ordering())).scalars())

    def save(self, entity: ThirdParty) -> ThirdParty:
        """Stage ``entity`` and flush, so a stale version fails here rather than on commit."""
        entity.updated_at = datetime.now(tz=UTC)
        self.session.add(entity)
        self.session.flush()
        return entity

    @staticmethod
    def _ordering() -> tuple[object, ...]:
        return (
            func.coalesce(third_party_table.c.legal_name, third_party_table.c.full_name, ""),
            third_party_table.c.id,
        )


class SqlAlchemyTemplateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ContractTemplate) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> ContractTemplate | None:
        return self.session.get(ContractTemplate, entity_id)

    def find_active_by_type(
        self, third_party_type: str, company_id: str
    ) -> list[ContractTemplate]:
        stmt = (
            select(ContractTemplate)
            .where(contract_template_table.c.company_id == company_id)
            .where(contract_template_table.c.third_party_type == third_party_type)
            .where(contract_template_table.c.active.is_(True))
            .order_by(contract_template_table.c.name, contract_template_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def find_active_by_company(self, company_id: str) -> list[ContractTemplate]:
        stmt = (
            select(ContractTemplate)
            .where(contract_template_table.c.company_id == company_id)
            .where(contract_template_table.c.active.is_(True))
            .order_by(contract_template_table.c.name, contract_template_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from fieldrecon.domain.ports.persistence import TemplateRepository, ThirdPartyRepository

    _session_stub = cast("Session", object())
    _third_party_repo: ThirdPartyRepository = SqlAlchemyThirdPartyRepository(_session_stub)
    _template_repo: TemplateRepository = SqlAlchemyTemplateRepository(_session_stub)

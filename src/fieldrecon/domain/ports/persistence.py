"""Ports for loading and saving third parties and reading contract templates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fieldrecon.domain.model import ContractTemplate, ThirdParty

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class ThirdPartyRepository(Repository[ThirdParty], Protocol):
    """Entity repository: third parties with their open attribute maps."""

    def find_by_type_and_company(
        self, third_party_type: str, company_id: str, *, limit: int | None = None
    ) -> list[ThirdParty]: ...

    def find_by_company(
        self, company_id: str, *, third_party_type: str | None = None, active_only: bool = True
    ) -> list[ThirdParty]: ...

    def save(self, entity: ThirdParty) -> ThirdParty: ...


@runtime_checkable
class TemplateRepository(Repository[ContractTemplate], Protocol):
    """Template repository: active templates and their declared fields."""

    def find_active_by_type(
        self, third_party_type: str, company_id: str
    ) -> list[ContractTemplate]: ...

    def find_active_by_company(self, company_id: str) -> list[ContractTemplate]: ...

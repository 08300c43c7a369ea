"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import Repository, TemplateRepository, ThirdPartyRepository
from .unit_of_work import (
    FieldRepositories,
    FieldUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "FieldRepositories",
    "FieldUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "TemplateRepository",
    "ThirdPartyRepository",
    "UnitOfWork",
]

"""Typed errors raised by the field reconciliation engine and its services.

None of these are retried internally: every engine operation is deterministic over
its inputs, so a retry would reproduce the same failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class FieldReconciliationError(Exception):
    """Base class for engine errors."""

    def to_dict(self) -> dict[str, object]:
        return {"error": type(self).__name__, "message": str(self)}


class ValidationError(FieldReconciliationError, ValueError):
    """Caller supplied structurally invalid input."""

    def __init__(self, message: str, *, keys: Iterable[str] = ()) -> None:
        self.keys = tuple(keys)
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        if self.keys:
            payload["keys"] = list(self.keys)
        return payload


class NotFoundError(FieldReconciliationError, LookupError):
    """A referenced third party or template does not exist (for this company)."""

    def __init__(self, kind: str, identifier: object) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["kind"] = self.kind
        payload["identifier"] = str(self.identifier)
        return payload

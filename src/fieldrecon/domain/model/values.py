"""Attribute values: a tagged union instead of untyped, convention-based scalars.

Free-form attribute maps used to be plain ``key -> anything`` structures whose type
intent had to be guessed on every read. Each value now carries its kind so it can
round-trip through persistence and serialization unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from functools import singledispatch
from typing import TYPE_CHECKING, ClassVar, cast

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model.enums import ValueKind

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class TextValue:
    KIND: ClassVar[ValueKind] = ValueKind.TEXT

    text: str

    @property
    def kind(self) -> ValueKind:
        return self.KIND

    def to_plain(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class NumberValue:
    KIND: ClassVar[ValueKind] = ValueKind.NUMBER

    number: int | float

    @property
    def kind(self) -> ValueKind:
        return self.KIND

    def to_plain(self) -> int | float:
        return self.number


@dataclass(frozen=True, slots=True)
class DateValue:
    KIND: ClassVar[ValueKind] = ValueKind.DATE

    day: date

    @property
    def kind(self) -> ValueKind:
        return self.KIND

    def to_plain(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True, slots=True)
class BooleanValue:
    KIND: ClassVar[ValueKind] = ValueKind.BOOLEAN

    flag: bool

    @property
    def kind(self) -> ValueKind:
        return self.KIND

    def to_plain(self) -> bool:
        return self.flag


type AttributeValue = TextValue | NumberValue | DateValue | BooleanValue
type AttributeMap = dict[str, AttributeValue]
type PlainScalar = str | int | float | bool


@singledispatch
def attribute_value(raw: object) -> AttributeValue:
    """Wrap a plain scalar in the matching value type."""
    raise ValidationError(f"Unsupported attribute value type: {type(raw).__name__}")


@attribute_value.register
def _(raw: str) -> AttributeValue:
    return TextValue(raw)


@attribute_value.register
def _(raw: bool) -> AttributeValue:  # noqa: FBT001
    return BooleanValue(raw)


@attribute_value.register(int)
@attribute_value.register(float)
def _(raw: float) -> AttributeValue:
    return NumberValue(raw)


@attribute_value.register
def _(raw: date) -> AttributeValue:
    return DateValue(raw)


@attribute_value.register
def _(raw: datetime) -> AttributeValue:
    return DateValue(raw.date())


@attribute_value.register(TextValue)
@attribute_value.register(NumberValue)
@attribute_value.register(DateValue)
@attribute_value.register(BooleanValue)
def _(raw: AttributeValue) -> AttributeValue:
    return raw


def coerce_attributes(attributes: Mapping[str, object]) -> AttributeMap:
    """Return a fresh attribute map, wrapping plain scalars and dropping ``None``."""

    coerced: AttributeMap = {}
    for key, raw in attributes.items():
        if raw is None:
            continue
        coerced[key] = attribute_value(raw)
    return coerced


def is_blank(value: AttributeValue | None) -> bool:
    """Only missing values and whitespace-only text count as blank."""

    if value is None:
        return True
    return isinstance(value, TextValue) and not value.text.strip()


def to_tagged(value: AttributeValue) -> dict[str, object]:
    return {"kind": value.kind.value, "value": value.to_plain()}


def from_tagged(payload: Mapping[str, object]) -> AttributeValue:
    """Inverse of :func:`to_tagged`; used by persistence adapters."""

    try:
        kind = ValueKind(str(payload["kind"]))
        raw = payload["value"]
    except (KeyError, ValueError) as exc:
        raise ValidationError(f"Malformed tagged attribute value: {payload!r}") from exc
    match kind:
        case ValueKind.TEXT:
            return TextValue(str(raw))
        case ValueKind.NUMBER:
            if isinstance(raw, bool) or not isinstance(raw, int | float):
                raise ValidationError(f"Number attribute holds {raw!r}")
            return NumberValue(raw)
        case ValueKind.DATE:
            return DateValue(date.fromisoformat(cast(str, raw)))
        case ValueKind.BOOLEAN:
            return BooleanValue(bool(raw))


def attributes_to_plain(attributes: Mapping[str, AttributeValue]) -> dict[str, PlainScalar]:
    return {key: value.to_plain() for key, value in attributes.items()}

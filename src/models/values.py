"""Tagged user values.

Answers and eligibility inputs are never passed around as bare ``Any``:
each carries an explicit ``kind`` so the criterion evaluator and step
validation can reject type mismatches deterministically instead of
coercing loosely.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, TypeAdapter, field_validator

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(text: str) -> date | None:
    """Return the calendar date a ``YYYY-MM-DD`` string names, else ``None``."""
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


class UntaggableValueError(ValueError):
    """An input value that has no tagged representation."""

    def __init__(self, field: str, raw: Any) -> None:
        self.field = field
        super().__init__(f"'{field}' has unsupported type {type(raw).__name__}")


class NumberValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: StrictInt | StrictFloat

    @field_validator("value")
    @classmethod
    def _finite(cls, v: int | float) -> int | float:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("number must be finite")
        return v


class TextValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: StrictStr


class DateValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["date"] = "date"
    value: date


class SelectValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["select"] = "select"
    value: StrictStr


UserValue = Annotated[
    NumberValue | TextValue | DateValue | SelectValue,
    Field(discriminator="kind"),
]

_USER_VALUE_ADAPTER: TypeAdapter[UserValue] = TypeAdapter(UserValue)


def to_user_value(raw: Any) -> NumberValue | TextValue | DateValue | SelectValue | None:
    """Wrap a plain JSON value in its tagged form.

    Already-tagged values and ``{"kind": ..., "value": ...}`` mappings pass
    through validation unchanged.  Booleans become ``select`` answers
    ``"yes"`` / ``"no"``; ISO ``YYYY-MM-DD`` strings become dates.  ``None``
    means the value is absent.

    Raises
    ------
    TypeError
        If *raw* has no tagged representation (lists, nested objects).
    pydantic.ValidationError
        If *raw* is a ``{"kind": ..., "value": ...}`` mapping whose kind is
        unknown or whose value does not fit that kind.
    """
    if raw is None:
        return None
    if isinstance(raw, NumberValue | TextValue | DateValue | SelectValue):
        return raw
    if isinstance(raw, dict) and "kind" in raw:
        return _USER_VALUE_ADAPTER.validate_python(raw)
    if isinstance(raw, bool):
        return SelectValue(value="yes" if raw else "no")
    if isinstance(raw, int | float):
        return NumberValue(value=raw)
    if isinstance(raw, datetime):
        return DateValue(value=raw.date())
    if isinstance(raw, date):
        return DateValue(value=raw)
    if isinstance(raw, str):
        parsed = parse_iso_date(raw)
        return DateValue(value=parsed) if parsed is not None else TextValue(value=raw)
    raise TypeError(f"unsupported input type: {type(raw).__name__}")


def normalize_inputs(raw: dict[str, Any] | None) -> dict[str, NumberValue | TextValue | DateValue | SelectValue]:
    """Tag every value of a plain input mapping, dropping absent (``None``) entries.

    Raises
    ------
    UntaggableValueError
        Naming the first key whose value cannot be tagged.
    """
    if not raw:
        return {}
    tagged = {}
    for key, value in raw.items():
        try:
            wrapped = to_user_value(value)
        except (TypeError, ValueError) as exc:
            raise UntaggableValueError(key, value) from exc
        if wrapped is not None:
            tagged[key] = wrapped
    return tagged

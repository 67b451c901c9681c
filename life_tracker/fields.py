"""
Field descriptors: the metadata that drives both the add forms and the
generic edit dialog.

A descriptor names one editable attribute of a record. ``kind`` is one of
``text``, ``number`` or ``choice``; choice fields carry an ordered list of
``(value, label)`` pairs. The remaining attributes are presentation hints and
input rules used when a raw form is cleaned into a row.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import ValidationError

TEXT = "text"
NUMBER = "number"
CHOICE = "choice"
KINDS = (TEXT, NUMBER, CHOICE)


def options(values: Iterable[str]) -> tuple[tuple[str, str], ...]:
    """Choice pairs whose label is the value itself."""
    return tuple((v, v) for v in values)


def parse_number(raw: Any, *, integer: bool = False, label: str = "Value") -> int | float:
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a number.")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text_val = (raw or "").strip() if isinstance(raw, str) else str(raw)
        try:
            value = float(text_val)
        except ValueError:
            raise ValidationError(f"{label} must be a number.") from None
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a number.")
    if integer:
        if not value.is_integer():
            raise ValidationError(f"{label} must be a whole number.")
        return int(value)
    return value


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    label: str
    kind: str = TEXT
    choices: tuple[tuple[str, str], ...] = ()
    required: bool = True
    default: Any = None
    integer: bool = False
    placeholder: str = ""
    input_type: str | None = None
    max_length: int | None = None

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Unknown field kind: {self.kind!r}")
        if self.kind == CHOICE and not self.choices:
            raise ValueError(f"Choice field {self.name!r} needs choices")

    @property
    def html_type(self) -> str:
        if self.input_type:
            return self.input_type
        return "number" if self.kind == NUMBER else "text"

    def choice_values(self) -> list[str]:
        return [value for value, _ in self.choices]

    def coerce(self, raw: Any) -> Any:
        """Convert one raw input into the value stored for this field."""
        if self.kind == NUMBER:
            return parse_number(raw, integer=self.integer, label=self.label)
        if self.kind == CHOICE:
            value = "" if raw is None else str(raw)
            if value not in self.choice_values():
                raise ValidationError(f"{self.label} must be one of: {', '.join(self.choice_values())}.", self.name)
            return value
        return "" if raw is None else str(raw)


def clean(fields: Iterable[FieldDescriptor], form: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a submitted form against ``fields`` and return typed values.

    Text is trimmed, empty optional fields fall back to their default, and the
    first offending field raises :class:`ValidationError`.
    """
    values: dict[str, Any] = {}
    for field in fields:
        raw = form.get(field.name)
        text_val = "" if raw is None else str(raw).strip()
        if not text_val:
            if field.required:
                raise ValidationError(f"{field.label} is required.", field.name)
            values[field.name] = field.default
            continue
        if field.max_length is not None and len(text_val) > field.max_length:
            raise ValidationError(f"{field.label} must be at most {field.max_length} characters.", field.name)
        values[field.name] = field.coerce(text_val)
    return values

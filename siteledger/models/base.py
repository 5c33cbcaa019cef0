"""
Shared base for the JSON-backed domain dataclasses.

Entities are plain dataclasses treated as immutable values: services never
mutate one in place, they build a replacement with ``dataclasses.replace``
and hand the new Project to ``store.commit``.
"""

from __future__ import annotations

from dataclasses import fields
from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, JsonModel):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


class JsonModel:
    """Mixin: dataclass -> JSON-ready dict (enums by value, nested models expanded)."""

    def to_dict(self) -> dict:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


def coerce_enum(enum_cls: type[E], value: Any, default: E | None = None) -> E | None:
    """Resolve ``value`` against an Enum by value, then by name (case-insensitive).

    Returns ``default`` when nothing matches; callers that must reject bad
    input check for ``None``.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    for member in enum_cls:
        if member.value == value:
            return member
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text or member.name.lower() == text:
            return member
    return default


def as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def as_str(value: Any, default: str = "") -> str:
    return default if value is None else str(value)

"""Shared base for models parsed at the AI-response boundary."""

from __future__ import annotations

import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, model_validator

# Strings pydantic itself accepts for a bool field
_BOOL_WORDS = {"true", "false", "yes", "no", "on", "off", "1", "0", "t", "f", "y", "n"}


def _scalar_type(annotation: Any) -> Any:
    """``X`` for ``Optional[X]`` / ``X | None``, else the annotation unchanged."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_bool_like(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in (0, 1)
    if isinstance(value, str):
        return value.lower() in _BOOL_WORDS
    return False


class LenientModel(BaseModel):
    """Tolerates the usual drift in model-generated JSON.

    - Unknown keys are ignored.
    - ``null`` for a field that has a non-null default falls back to the default.
    - A bare string where a list is expected becomes a one-item list.
    - A list where a string is expected is joined with ", ".
    - A value that can't be read as a bool falls back to the field default.
    - Numbers where strings are expected are stringified.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _normalise_llm_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            field = cls.model_fields.get(key)
            if field is None:
                cleaned[key] = value
                continue
            if value is None and field.default is not None:
                continue
            target = _scalar_type(field.annotation)
            if isinstance(value, str) and get_origin(field.annotation) is list:
                value = [value] if value.strip() else []
            elif isinstance(value, list) and target is str:
                parts = [str(item).strip() for item in value if item is not None and not isinstance(item, (dict, list))]
                joined = ", ".join(p for p in parts if p)
                if not joined:
                    continue
                value = joined
            elif target is bool and not _is_bool_like(value):
                continue
            cleaned[key] = value
        return cleaned

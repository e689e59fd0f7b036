import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from fieldkit.errors import InvalidArgumentError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class FrozenModel(BaseModel):
    """Base class for immutable value objects."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)


def merge_properties(properties: Mapping[str, Any] | None, overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Combine a positional properties mapping with keyword overrides.

    Keyword overrides win on key collision.
    """
    if properties is None:
        return dict(overrides)
    if not isinstance(properties, Mapping):
        raise InvalidArgumentError(f"properties must be a mapping, got {type(properties).__name__}")
    return {**properties, **overrides}


def ensure_identifier(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{label} must be a string")
    if not _IDENTIFIER.match(value):
        raise InvalidArgumentError(f"{label} '{value}' is not a valid identifier")
    return value


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()

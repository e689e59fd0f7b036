"""Field descriptors: the schema definition of a single model attribute.

A descriptor pairs the SQLAlchemy type that backs the column with the storage
metadata (primary key, nullability, default, comment) and the validation rules
that data must satisfy. Descriptors are frozen; the only way to derive a
changed one is :meth:`FieldDescriptor.clone`.
"""

import copy
from typing import Any, Mapping

from pydantic import Field, field_validator
from sqlalchemy.types import TypeEngine

from fieldkit.errors import InvalidArgumentError
from fieldkit.models.base import FrozenModel, merge_properties
from fieldkit.models.enums import FieldKind


class _Disabled:
    """Marker meaning "no validation at all", distinct from "use defaults"."""

    _instance: "_Disabled | None" = None

    def __new__(cls) -> "_Disabled":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DISABLED"

    def __copy__(self) -> "_Disabled":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Disabled":
        return self


DISABLED = _Disabled()

# fixed at construction; sa_type and validation are derived from them
STRUCTURAL_PROPERTIES = ("kind", "sa_type", "length", "values", "element")


class FieldDescriptor(FrozenModel):
    kind: FieldKind | str
    sa_type: TypeEngine = Field(repr=False)
    length: int | None = None
    values: tuple[str, ...] | None = None
    element: "FieldDescriptor | None" = None
    primary_key: bool = False
    auto_increment: bool = False
    allow_null: bool | None = None
    default_value: Any = None
    comment: str | None = None
    example: str | None = None
    field_name: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)
    validation: dict[str, Any] | None = None

    @field_validator("validation", mode="before")
    @classmethod
    def _normalize_validation(cls, value: Any) -> dict[str, Any] | None:
        if value is None or value is DISABLED:
            return None
        if not isinstance(value, Mapping):
            raise ValueError("validation must be a mapping or DISABLED")
        return dict(value)

    @field_validator("values", mode="before")
    @classmethod
    def _normalize_values(cls, value: Any) -> tuple[str, ...] | None:
        if value is None:
            return None
        return tuple(value)

    def clone(self, overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> "FieldDescriptor":
        """Return a deep copy of this descriptor with ``overrides`` applied.

        Overrides replace top-level properties. A ``validation`` mapping is
        merged rule by rule over the copied rules, ``DISABLED`` drops them and
        ``None`` leaves them as they are. ``self`` is never modified.

        Raises:
            InvalidArgumentError: If an override is unknown or structural
                (kind, sa_type, length, values, element); build a new
                descriptor with the factory to change those.
        """
        changes = merge_properties(overrides, kwargs)
        structural = sorted(key for key in changes if key in STRUCTURAL_PROPERTIES)
        if structural:
            raise InvalidArgumentError(
                f"{', '.join(structural)} cannot be overridden on a clone; build a new descriptor instead"
            )
        unknown = sorted(set(changes) - set(type(self).model_fields))
        if unknown:
            raise InvalidArgumentError(f"unknown field properties: {', '.join(unknown)}")

        data: dict[str, Any] = {
            "kind": self.kind,
            "sa_type": self.sa_type,
            "length": self.length,
            "values": self.values,
            "element": self.element.clone() if self.element is not None else None,
            "primary_key": self.primary_key,
            "auto_increment": self.auto_increment,
            "allow_null": self.allow_null,
            "default_value": copy.deepcopy(self.default_value),
            "comment": self.comment,
            "example": self.example,
            "field_name": self.field_name,
            "extra": copy.deepcopy(self.extra),
            "validation": copy_validation(self.validation),
        }
        if "validation" in changes:
            data["validation"] = merge_validation(data["validation"], changes.pop("validation"))
        data.update(changes)
        return type(self)(**data)

    def check(self, value: Any) -> Any:
        """Validate ``value`` against nullability and the validation rules.

        Returns the value unchanged when it is valid.
        """
        from fieldkit.services.validation import check_value

        return check_value(self, value)

    def column(self, name: str | None = None):
        """Build a SQLAlchemy ``Column`` for this descriptor."""
        from fieldkit.services.columns import build_column

        return build_column(self, name)

    def mapped_column(self):
        """Build a SQLAlchemy ORM ``mapped_column`` for declarative classes."""
        from fieldkit.services.columns import build_mapped_column

        return build_mapped_column(self)

    def sqlmodel_field(self, name: str | None = None):
        """Build a SQLModel ``Field`` backed by this descriptor's column."""
        from fieldkit.services.columns import build_sqlmodel_field

        return build_sqlmodel_field(self, name)


def copy_validation(validation: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Copy a rule map so that list arguments are not shared with the source."""
    if validation is None:
        return None
    return {rule: list(argument) if isinstance(argument, list) else argument for rule, argument in validation.items()}


def merge_validation(current: Mapping[str, Any] | None, custom: Any) -> dict[str, Any] | None:
    """Overlay ``custom`` rules onto ``current`` with rule-level replacement."""
    if custom is DISABLED:
        return None
    if custom is None:
        return copy_validation(current)
    if not isinstance(custom, Mapping):
        raise InvalidArgumentError("validation must be a mapping, None or DISABLED")
    merged = copy_validation(current) or {}
    merged.update(copy_validation(custom) or {})
    return merged


def is_descriptor(obj: Any) -> bool:
    return isinstance(obj, FieldDescriptor)


__all__ = [
    "DISABLED",
    "STRUCTURAL_PROPERTIES",
    "FieldDescriptor",
    "copy_validation",
    "is_descriptor",
    "merge_validation",
]

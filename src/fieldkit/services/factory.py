"""Constructors for field descriptors.

Each constructor pairs a SQLAlchemy column type with the default validation
rules for its kind. Properties are passed as an optional mapping, as keywords,
or both (keywords win):

    fields.STRING(10)
    fields.STRING({"comment": "Title"})
    fields.STRING(10, comment="Title", validation=DISABLED)

A factory is bound to a NamedFieldRegistry; registered templates are invoked
as attributes, e.g. ``fields.EMAIL(allow_null=False)``.
"""

from typing import TYPE_CHECKING, Any, Mapping, Sequence

from sqlalchemy import types as sa_types
from sqlalchemy.types import TypeEngine

from fieldkit.errors import InvalidArgumentError
from fieldkit.models.base import merge_properties
from fieldkit.models.descriptor import STRUCTURAL_PROPERTIES, FieldDescriptor
from fieldkit.models.enums import FieldKind
from fieldkit.services.validation import DEFAULT_STRING_LENGTH, synthesize_validation

if TYPE_CHECKING:
    from fieldkit.services.registry import NamedFieldRegistry


def _split_validation(properties: dict[str, Any]) -> tuple[dict[str, Any], Any]:
    for key in STRUCTURAL_PROPERTIES:
        if key in properties:
            raise InvalidArgumentError(f"'{key}' is set by the constructor and cannot be passed as a property")
    unknown = sorted(set(properties) - set(FieldDescriptor.model_fields))
    if unknown:
        raise InvalidArgumentError(f"unknown field properties: {', '.join(unknown)}")
    custom = properties.pop("validation", None)
    return properties, custom


def _ensure_length(length: Any) -> int:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidArgumentError(f"length must be an integer, got {type(length).__name__}")
    if length < 0:
        raise InvalidArgumentError(f"length must not be negative, got {length}")
    return length


def _build(
    kind: FieldKind | str,
    sa_type: TypeEngine,
    properties: dict[str, Any],
    *,
    length: int | None = None,
    values: tuple[str, ...] | None = None,
    element: FieldDescriptor | None = None,
    base: Mapping[str, Any] | None = None,
) -> FieldDescriptor:
    properties, custom = _split_validation(properties)
    validation = synthesize_validation(
        kind,
        length=length,
        values=values,
        element=element,
        base=base,
        custom=custom,
    )
    return FieldDescriptor(
        kind=kind,
        sa_type=sa_type,
        length=length,
        values=values,
        element=element,
        validation=validation,
        **properties,
    )


class FieldFactory:
    """Builds field descriptors and exposes registered templates by name."""

    def __init__(self, registry: "NamedFieldRegistry | None" = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> "NamedFieldRegistry":
        if self._registry is None:
            from fieldkit.services.registry import NamedFieldRegistry

            self._registry = NamedFieldRegistry()
        return self._registry

    def ID(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        """Auto-incrementing integer primary key.

        ``primary_key``, ``auto_increment`` and ``allow_null`` are always
        ``True``, ``True`` and ``False``; use :meth:`CLONE` to change them.
        """
        props = merge_properties(properties, kwargs)
        props.update(primary_key=True, auto_increment=True, allow_null=False)
        return _build(FieldKind.ID, sa_types.Integer(), props)

    def INTEGER(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        props = merge_properties(properties, kwargs)
        base = {"min": 1} if props.get("primary_key") else None
        return _build(FieldKind.INTEGER, sa_types.Integer(), props, base=base)

    def FLOAT(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        return _build(FieldKind.FLOAT, sa_types.Float(), merge_properties(properties, kwargs))

    def STRING(
        self,
        length: int | Mapping[str, Any] | None = None,
        properties: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> FieldDescriptor:
        """Bounded string.

        Args:
            length: The maximum length, or the properties mapping when a
                mapping is passed (the length then defaults to 255).
            properties: Field properties when ``length`` is an integer.
        """
        if isinstance(length, Mapping):
            if properties is not None:
                raise InvalidArgumentError("properties given twice")
            properties, length = length, None
        size = DEFAULT_STRING_LENGTH if length is None else _ensure_length(length)
        props = merge_properties(properties, kwargs)
        return _build(FieldKind.STRING, sa_types.String(size), props, length=size)

    def TEXT(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        return _build(FieldKind.TEXT, sa_types.Text(), merge_properties(properties, kwargs))

    def BOOLEAN(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        return _build(FieldKind.BOOLEAN, sa_types.Boolean(), merge_properties(properties, kwargs))

    def DATE(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        return _build(FieldKind.DATE, sa_types.DateTime(timezone=True), merge_properties(properties, kwargs))

    def UUID(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        return _build(FieldKind.UUID, sa_types.Uuid(), merge_properties(properties, kwargs))

    def ENUM(
        self,
        values: Sequence[str],
        properties: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> FieldDescriptor:
        if not isinstance(values, (list, tuple)) or not values:
            raise InvalidArgumentError("enum values must be a non-empty list")
        if not all(isinstance(value, str) for value in values):
            raise InvalidArgumentError("enum values must be strings")
        choices = tuple(values)
        props = merge_properties(properties, kwargs)
        return _build(FieldKind.ENUM, sa_types.Enum(*choices), props, values=choices)

    def ARRAY(
        self,
        element: FieldDescriptor | FieldKind,
        properties: Mapping[str, Any] | None = None,
        *,
        length: int | None = None,
        **kwargs: Any,
    ) -> FieldDescriptor:
        """Array of elements of one kind.

        Args:
            element: The element descriptor, or a FieldKind for which a
                default element descriptor is built.
            length: STRING element length when ``element`` is a kind.
        """
        if isinstance(element, FieldKind):
            element = self._element_for(element, length)
        elif not isinstance(element, FieldDescriptor):
            raise InvalidArgumentError("array element must be a FieldDescriptor or a FieldKind")
        elif element.kind == FieldKind.ARRAY:
            raise InvalidArgumentError("arrays of arrays are not supported")
        elif length is not None:
            raise InvalidArgumentError("length applies only when the element is given as a kind")
        props = merge_properties(properties, kwargs)
        return _build(FieldKind.ARRAY, sa_types.ARRAY(element.sa_type), props, element=element)

    def CUSTOM(
        self,
        kind: str,
        sa_type: TypeEngine,
        properties: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> FieldDescriptor:
        """Descriptor of a user-defined kind with no default rules."""
        if not isinstance(kind, str) or not kind:
            raise InvalidArgumentError("custom kind must be a non-empty string")
        if not isinstance(sa_type, TypeEngine):
            raise InvalidArgumentError("sa_type must be a SQLAlchemy type instance")
        return _build(kind, sa_type, merge_properties(properties, kwargs))

    def CLONE(
        self,
        existing: FieldDescriptor,
        overrides: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> FieldDescriptor:
        if not isinstance(existing, FieldDescriptor):
            raise InvalidArgumentError("CLONE requires a FieldDescriptor")
        return existing.clone(overrides, **kwargs)

    def add(self, name: str, template: FieldDescriptor) -> None:
        """Register ``template`` under ``name`` in the bound registry."""
        self.registry.register(name, template)

    def __getattr__(self, name: str) -> Any:
        # audit templates such as _CREATED_AT start with a single underscore
        if name.startswith("__") or name == "_registry":
            raise AttributeError(name)
        registry = self.registry
        if name not in registry:
            raise AttributeError(f"{type(self).__name__} has no constructor or template '{name}'")

        def invoke(overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
            return registry.invoke(name, overrides, **kwargs)

        invoke.__name__ = name
        return invoke

    def _element_for(self, kind: FieldKind, length: int | None) -> FieldDescriptor:
        if kind == FieldKind.STRING:
            return self.STRING(length)
        if length is not None:
            raise InvalidArgumentError("length applies only to STRING elements")
        if kind == FieldKind.ID:
            return self.INTEGER()
        if kind in (FieldKind.ENUM, FieldKind.ARRAY):
            raise InvalidArgumentError(f"{kind.name} elements must be given as a descriptor")
        return getattr(self, kind.name)()

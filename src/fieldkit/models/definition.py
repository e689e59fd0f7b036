"""Model definitions: attribute maps plus the associations between models."""

from types import MappingProxyType
from typing import Any, Callable, Mapping

from pydantic import field_validator

from fieldkit.errors import InvalidArgumentError, UnknownFieldError
from fieldkit.models.base import FrozenModel, ensure_identifier
from fieldkit.models.descriptor import FieldDescriptor


class Association(FrozenModel):
    name: str
    target: str
    many: bool = False


class ModelDefinition:
    """A named model: its attribute descriptors and outgoing associations.

    Attributes are fixed at construction. Associations are added during setup
    with :meth:`associate`. Calling the definition clones one of its
    attributes with overrides.
    """

    def __init__(self, name: str, attributes: Mapping[str, FieldDescriptor]) -> None:
        self._name = ensure_identifier(name, "model name")
        self._attributes = dict(attributes)
        self._associations: dict[str, Association] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def attributes(self) -> Mapping[str, FieldDescriptor]:
        return MappingProxyType(self._attributes)

    @property
    def associations(self) -> Mapping[str, Association]:
        return MappingProxyType(self._associations)

    def associate(self, name: str, target: "ModelDefinition | str", many: bool = False) -> Association:
        """Declare that ``name`` on this model leads to the ``target`` model."""
        ensure_identifier(name, "association name")
        if name in self._attributes:
            raise InvalidArgumentError(f"association '{name}' collides with an attribute of model '{self._name}'")
        if name in self._associations:
            raise InvalidArgumentError(f"association '{name}' is already declared on model '{self._name}'")
        target_name = target.name if isinstance(target, ModelDefinition) else target
        association = Association(name=name, target=target_name, many=many)
        self._associations[name] = association
        return association

    def __call__(self, field: str, overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        try:
            attribute = self._attributes[field]
        except KeyError:
            raise UnknownFieldError(field, self._name) from None
        return attribute.clone(overrides, **kwargs)

    def __contains__(self, field: object) -> bool:
        return field in self._attributes

    def __repr__(self) -> str:
        return (
            f"ModelDefinition(name={self._name!r}, attributes={list(self._attributes)}, "
            f"associations={list(self._associations)})"
        )


AssociateCallback = Callable[[ModelDefinition, Mapping[str, ModelDefinition]], None]


class ModelSource(FrozenModel):
    """A model definition supplied from outside the container.

    ``associate`` is called once every source of an import has been defined,
    with the source's own definition and all definitions of the container.
    """

    name: str
    attributes: dict[str, FieldDescriptor]
    associate: AssociateCallback | None = None

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return ensure_identifier(value, "model name")


__all__ = ["AssociateCallback", "Association", "ModelDefinition", "ModelSource"]

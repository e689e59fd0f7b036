"""Resolution of THIS references over nested, associated model structures.

A tree is made of:

* ``SelfReference`` leaves, replaced by a clone of the owning model's
  attribute with the reference's overrides applied;
* ``FieldDescriptor`` leaves, passed through unchanged;
* single-element lists, a template repeated for each element of an array
  association, resolved once and re-wrapped;
* mappings, whose keys either follow an association of the model in scope
  (the target becomes the new scope) or open a plain group with no scope.

Neither the tree nor the model attribute maps are modified.
"""

from typing import Any, Mapping

from fieldkit.errors import (
    InvalidArgumentError,
    MissingModelScopeError,
    UnknownAssociationError,
    UnknownFieldError,
    UnknownModelError,
)
from fieldkit.models.definition import ModelDefinition
from fieldkit.models.descriptor import FieldDescriptor
from fieldkit.models.reference import SelfReference


def resolve(
    models: Mapping[str, ModelDefinition],
    model_name: str | None,
    tree: Mapping[str, Any] | list[Any] | tuple[Any, ...],
) -> dict[str, Any] | list[Any]:
    """Resolve every THIS reference in ``tree``.

    Args:
        models: The model definitions, by name.
        model_name: The model in scope at the root, or None.
        tree: The nested tree to resolve.

    Returns:
        A new structure of the same shape containing only descriptors.

    Raises:
        UnknownModelError: If ``model_name`` or a reference hint is not defined.
        UnknownFieldError: If a referenced attribute is not defined.
        UnknownAssociationError: If an association targets an undefined model.
        MissingModelScopeError: If a reference has no model to resolve against.
        InvalidArgumentError: If the tree contains an unsupported node.
    """
    scope = _lookup(models, model_name) if model_name is not None else None
    if isinstance(tree, (SelfReference, FieldDescriptor)) or not isinstance(tree, (Mapping, list, tuple)):
        raise InvalidArgumentError("tree must be a mapping or a single-element list")
    return _resolve_node(models, scope, tree, ())


def _resolve_node(
    models: Mapping[str, ModelDefinition],
    scope: ModelDefinition | None,
    node: Any,
    path: tuple[str, ...],
) -> Any:
    if isinstance(node, SelfReference):
        return _resolve_reference(models, scope, node, path)
    if isinstance(node, FieldDescriptor):
        return node
    if isinstance(node, (list, tuple)):
        if len(node) != 1:
            raise InvalidArgumentError(
                f"list at '{_format(path)}' must hold exactly one template, got {len(node)}"
            )
        return [_resolve_node(models, scope, node[0], path)]
    if isinstance(node, Mapping):
        resolved = {}
        for key, child in node.items():
            child_scope = scope if _is_leaf(child) else _descend(models, scope, key)
            resolved[key] = _resolve_node(models, child_scope, child, path + (key,))
        return resolved
    raise InvalidArgumentError(f"unsupported node {type(node).__name__} at '{_format(path)}'")


def _is_leaf(node: Any) -> bool:
    # attributes, including array attributes, stay in the scope of their model
    if isinstance(node, (list, tuple)) and len(node) == 1:
        node = node[0]
    return isinstance(node, (SelfReference, FieldDescriptor))


def _resolve_reference(
    models: Mapping[str, ModelDefinition],
    scope: ModelDefinition | None,
    reference: SelfReference,
    path: tuple[str, ...],
) -> FieldDescriptor:
    if reference.model_name is not None:
        owner = _lookup(models, reference.model_name)
    elif scope is not None:
        owner = scope
    else:
        raise MissingModelScopeError(path)
    if not path:
        raise InvalidArgumentError("THIS reference must be placed under an attribute name")
    field = path[-1]
    if field not in owner.attributes:
        raise UnknownFieldError(field, owner.name)
    return owner.attributes[field].clone(reference.overrides)


def _descend(
    models: Mapping[str, ModelDefinition],
    scope: ModelDefinition | None,
    key: str,
) -> ModelDefinition | None:
    if scope is None:
        return None
    association = scope.associations.get(key)
    if association is None:
        return None
    target = models.get(association.target)
    if target is None:
        raise UnknownAssociationError(key, scope.name, association.target)
    return target


def _lookup(models: Mapping[str, ModelDefinition], model_name: str) -> ModelDefinition:
    try:
        return models[model_name]
    except KeyError:
        raise UnknownModelError(model_name) from None


def _format(path: tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"

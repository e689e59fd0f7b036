from typing import Any, Mapping

from pydantic import Field

from fieldkit.errors import InvalidArgumentError
from fieldkit.models.base import FrozenModel, merge_properties


class SelfReference(FrozenModel):
    """Placeholder for "the attribute already defined on the model".

    Resolved by :func:`fieldkit.services.resolver.resolve` into a clone of the
    model attribute with ``overrides`` applied. ``model_name`` selects the
    owning model explicitly; without it the model in scope is used.
    """

    model_name: str | None = None
    overrides: dict[str, Any] = Field(default_factory=dict)


def THIS(
    model_name: str | Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> SelfReference:
    """Mark an attribute as a reference to the model's own definition.

        THIS()
        THIS(allow_null=True)
        THIS("author", {"allow_null": True})
        THIS({"allow_null": True})
    """
    if isinstance(model_name, Mapping):
        if overrides is not None:
            raise InvalidArgumentError("overrides given twice")
        model_name, overrides = None, model_name
    elif model_name is not None and not isinstance(model_name, str):
        raise InvalidArgumentError("THIS expects a model name or an overrides mapping")
    return SelfReference(model_name=model_name, overrides=merge_properties(overrides, kwargs))


def is_self_reference(obj: Any) -> bool:
    return isinstance(obj, SelfReference)


__all__ = ["THIS", "SelfReference", "is_self_reference"]

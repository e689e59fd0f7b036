"""Exception hierarchy for fieldkit.

Construction and lookup errors are raised while descriptors, templates and
models are being declared or resolved. Value errors are raised later, when a
descriptor's validation rules are run against data.
"""

from typing import Any


class FieldKitError(Exception):
    """Base class for every error raised by fieldkit."""


class InvalidArgumentError(FieldKitError, ValueError):
    """A constructor or resolver received malformed input."""


class DuplicateNameError(FieldKitError, ValueError):
    """A field template name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"field template '{name}' is already registered")


class DuplicateModelError(FieldKitError, ValueError):
    """A model name is already defined in the container."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"model '{model_name}' is already defined")


class UnknownNameError(FieldKitError, LookupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"field template '{name}' is not registered")


class UnknownModelError(FieldKitError, LookupError):
    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"model '{model_name}' is not defined")


class UnknownFieldError(FieldKitError, LookupError):
    def __init__(self, field: str, model_name: str) -> None:
        self.field = field
        self.model_name = model_name
        super().__init__(f"field '{field}' is not defined on model '{model_name}'")


class UnknownAssociationError(FieldKitError, LookupError):
    """An association points at a model the container does not know."""

    def __init__(self, association: str, model_name: str, target: str) -> None:
        self.association = association
        self.model_name = model_name
        self.target = target
        super().__init__(
            f"association '{association}' of model '{model_name}' targets unknown model '{target}'"
        )


class MissingModelScopeError(FieldKitError):
    """A THIS reference has neither a model hint nor an owning model in scope."""

    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path
        location = ".".join(path) or "<root>"
        super().__init__(f"THIS reference at '{location}' has no model in scope; pass a model name")


class ModelSourceError(FieldKitError):
    """A model file could not be turned into a model source."""


class FieldValueError(FieldKitError, ValueError):
    """Base class for data-time validation failures."""


class RuleViolationError(FieldValueError):
    def __init__(self, rule: str, value: Any, argument: Any = None) -> None:
        self.rule = rule
        self.value = value
        self.argument = argument
        super().__init__(f"value {value!r} violates rule '{rule}'")


class ElementValidationFailedError(FieldValueError):
    """An array element does not conform to the array's element kind."""

    def __init__(self, index: int, element: Any, expected: str) -> None:
        self.index = index
        self.element = element
        self.expected = expected
        super().__init__(f"element {index} ({element!r}) is invalid: expected {expected}")

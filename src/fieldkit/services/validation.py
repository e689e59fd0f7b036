"""Validation rule synthesis and execution.

Rule maps use one flat representation: each rule name maps straight to its
argument (``True``, a bound, a ``[low, high]`` pair, a list of allowed values
or a callable). Defaults come from a closed per-kind table, then caller base
rules are applied, then custom rules; a rule present in a later layer replaces
the earlier one entirely.
"""

import re
from datetime import date, datetime
from typing import Any, Callable, Mapping
from uuid import UUID

from fieldkit.errors import (
    ElementValidationFailedError,
    InvalidArgumentError,
    RuleViolationError,
)
from fieldkit.models.descriptor import DISABLED, FieldDescriptor, copy_validation, merge_validation
from fieldkit.models.enums import FieldKind

INT32_MAX = 2147483647
FLOAT_MAX = 1.0e308
DEFAULT_STRING_LENGTH = 255

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def default_rules(
    kind: FieldKind | str,
    *,
    length: int | None = None,
    values: tuple[str, ...] | None = None,
    element: FieldDescriptor | None = None,
) -> dict[str, Any]:
    """Return the default rule map for ``kind``.

    Custom kinds and TEXT carry no default rules.
    """
    if kind == FieldKind.ID:
        return {"is_int": True, "min": 1, "max": INT32_MAX}
    if kind == FieldKind.INTEGER:
        return {"is_int": True, "min": 0, "max": INT32_MAX}
    if kind == FieldKind.FLOAT:
        return {"is_float": True, "min": 0.0, "max": FLOAT_MAX}
    if kind == FieldKind.STRING:
        return {"len": [0, DEFAULT_STRING_LENGTH if length is None else length]}
    if kind == FieldKind.ENUM:
        return {"is_in": list(values or ())}
    if kind == FieldKind.ARRAY:
        if element is None:
            raise InvalidArgumentError("array validation requires an element descriptor")
        return {"is_array": ElementValidator(element)}
    if kind == FieldKind.BOOLEAN:
        return {"is_boolean": True}
    if kind == FieldKind.DATE:
        return {"is_date": True}
    if kind == FieldKind.UUID:
        return {"is_uuid": True}
    return {}


def synthesize_validation(
    kind: FieldKind | str,
    *,
    length: int | None = None,
    values: tuple[str, ...] | None = None,
    element: FieldDescriptor | None = None,
    base: Mapping[str, Any] | None = None,
    custom: Any = None,
) -> dict[str, Any] | None:
    """Build the final rule map for a descriptor.

    Args:
        kind: The descriptor kind selecting the default rules.
        length: STRING length.
        values: ENUM allowed values.
        element: ARRAY element descriptor.
        base: Caller-supplied rules applied over the defaults.
        custom: Caller rules with the highest precedence, ``None`` for
            defaults only, or ``DISABLED`` for no validation at all.

    Returns:
        The merged rule map, or None when validation is disabled.
    """
    if custom is DISABLED:
        return None
    rules = default_rules(kind, length=length, values=values, element=element)
    if base:
        rules.update(copy_validation(base) or {})
    return merge_validation(rules, custom)


class ElementValidator:
    """Per-element validator used as the ``is_array`` rule argument.

    Checks that the value is a list or tuple and that every element matches
    the element descriptor: its kind, its STRING length and its own rules.
    """

    def __init__(self, element: FieldDescriptor) -> None:
        self._element = element

    @property
    def element(self) -> FieldDescriptor:
        return self._element

    @property
    def expected(self) -> str:
        return describe_kind(self._element)

    def __call__(self, value: Any) -> bool:
        if not isinstance(value, (list, tuple)):
            raise RuleViolationError("is_array", value)
        for index, item in enumerate(value):
            self._check_element(index, item)
        return True

    def _check_element(self, index: int, item: Any) -> None:
        element = self._element
        if item is None:
            if element.allow_null:
                return
            raise ElementValidationFailedError(index, item, self.expected)
        if not _matches_kind(element, item):
            raise ElementValidationFailedError(index, item, self.expected)
        if element.validation is None:
            return
        try:
            check_rules(element.validation, item)
        except RuleViolationError as err:
            raise ElementValidationFailedError(index, item, self.expected) from err

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementValidator):
            return NotImplemented
        return self._element == other._element

    def __hash__(self) -> int:
        return hash(self._element.kind)

    def __repr__(self) -> str:
        return f"ElementValidator({self.expected})"


def describe_kind(descriptor: FieldDescriptor) -> str:
    kind = str(descriptor.kind).upper()
    if descriptor.kind == FieldKind.STRING:
        length = DEFAULT_STRING_LENGTH if descriptor.length is None else descriptor.length
        return f"{kind} of at most {length} characters"
    if descriptor.kind == FieldKind.ENUM:
        return f"{kind} value in {list(descriptor.values or ())}"
    if descriptor.kind == FieldKind.ARRAY and descriptor.element is not None:
        return f"{kind} of {describe_kind(descriptor.element)}"
    return kind


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if isinstance(value, str):
        try:
            datetime.fromisoformat(value)
        except ValueError:
            return False
        return True
    return False


def _is_uuid(value: Any) -> bool:
    if isinstance(value, UUID):
        return True
    if isinstance(value, str):
        try:
            UUID(value)
        except ValueError:
            return False
        return True
    return False


def _matches_kind(descriptor: FieldDescriptor, value: Any) -> bool:
    kind = descriptor.kind
    if kind in (FieldKind.ID, FieldKind.INTEGER):
        return _is_integer(value)
    if kind == FieldKind.FLOAT:
        return _is_number(value)
    if kind == FieldKind.STRING:
        length = DEFAULT_STRING_LENGTH if descriptor.length is None else descriptor.length
        return isinstance(value, str) and len(value) <= length
    if kind == FieldKind.TEXT:
        return isinstance(value, str)
    if kind == FieldKind.ENUM:
        return value in (descriptor.values or ())
    if kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if kind == FieldKind.DATE:
        return _is_date(value)
    if kind == FieldKind.UUID:
        return _is_uuid(value)
    if kind == FieldKind.ARRAY:
        return isinstance(value, (list, tuple))
    return True


def _check_len(value: Any, argument: Any) -> bool:
    low, high = argument
    return low <= len(value) <= high


RULES: dict[str, Callable[[Any, Any], bool]] = {
    "is_int": lambda value, _: _is_integer(value),
    "is_float": lambda value, _: _is_number(value),
    "is_boolean": lambda value, _: isinstance(value, bool),
    "is_date": lambda value, _: _is_date(value),
    "is_uuid": lambda value, _: _is_uuid(value),
    "is_email": lambda value, _: isinstance(value, str) and bool(_EMAIL.match(value)),
    "min": lambda value, argument: value >= argument,
    "max": lambda value, argument: value <= argument,
    "len": _check_len,
    "is_in": lambda value, argument: value in argument,
}


def check_rules(validation: Mapping[str, Any] | None, value: Any) -> None:
    """Run every rule in ``validation`` against ``value``.

    Rules whose argument is ``False`` are skipped. Callable arguments act as
    custom predicates. Raises RuleViolationError on the first failing rule.
    """
    if not validation:
        return
    for rule, argument in validation.items():
        if argument is False:
            continue
        if callable(argument):
            if argument(value) is False:
                raise RuleViolationError(rule, value)
            continue
        check = RULES.get(rule)
        if check is None:
            raise InvalidArgumentError(f"unknown validation rule '{rule}'")
        try:
            passed = check(value, argument)
        except TypeError:
            passed = False
        if not passed:
            raise RuleViolationError(rule, value, argument)


def check_value(descriptor: FieldDescriptor, value: Any) -> Any:
    """Validate ``value`` against a descriptor's nullability and rules."""
    if value is None:
        if descriptor.allow_null is False:
            raise RuleViolationError("allow_null", value, False)
        return value
    check_rules(descriptor.validation, value)
    return value

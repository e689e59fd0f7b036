"""Bridge between field descriptors and SQLAlchemy columns.

Descriptors build plain ``Column`` objects, ORM ``mapped_column`` objects and
SQLModel fields. Every column built here carries its descriptor in
``Column.info`` so that mapped classes can be read back into model sources
without losing validation rules. Columns that were not built from a
descriptor are mapped to the closest built-in kind.
"""

from typing import Any

import sqlmodel
from sqlalchemy import Column, inspect
from sqlalchemy import types as sa_types
from sqlalchemy.orm import MappedColumn, mapped_column
from sqlalchemy.types import SchemaType, TypeEngine

from fieldkit.errors import InvalidArgumentError
from fieldkit.models.definition import ModelDefinition, ModelSource
from fieldkit.models.descriptor import FieldDescriptor
from fieldkit.services.factory import FieldFactory

FIELD_INFO_KEY = "fieldkit.field"


def _column_type(descriptor: FieldDescriptor) -> TypeEngine:
    # schema types (Enum, Boolean) attach events to their table
    if isinstance(descriptor.sa_type, SchemaType):
        return descriptor.sa_type.copy()
    return descriptor.sa_type


def _column_kwargs(descriptor: FieldDescriptor) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "primary_key": descriptor.primary_key,
        "comment": descriptor.comment,
        "info": {FIELD_INFO_KEY: descriptor},
    }
    if descriptor.auto_increment:
        kwargs["autoincrement"] = True
    if descriptor.allow_null is not None:
        kwargs["nullable"] = descriptor.allow_null
    if descriptor.default_value is not None:
        kwargs["default"] = descriptor.default_value
    return kwargs


def build_column(descriptor: FieldDescriptor, name: str | None = None) -> Column:
    """Build a ``Column`` named ``name`` or the descriptor's ``field_name``.

    Without either, the column is left unnamed for declarative mapping to
    name it after the attribute.
    """
    column_name = name or descriptor.field_name
    args: list[Any] = [column_name] if column_name else []
    return Column(*args, _column_type(descriptor), **_column_kwargs(descriptor))


def build_mapped_column(descriptor: FieldDescriptor) -> MappedColumn:
    args: list[Any] = [descriptor.field_name] if descriptor.field_name else []
    return mapped_column(*args, _column_type(descriptor), **_column_kwargs(descriptor))


def build_sqlmodel_field(descriptor: FieldDescriptor, name: str | None = None) -> Any:
    return sqlmodel.Field(default=descriptor.default_value, sa_column=build_column(descriptor, name))


def descriptor_from_column(column: Column, fields: FieldFactory | None = None) -> FieldDescriptor:
    """Return the descriptor stored on ``column`` or infer one from its type.

    The result always carries the column's storage name as ``field_name``.
    """
    stored = column.info.get(FIELD_INFO_KEY)
    if isinstance(stored, FieldDescriptor):
        if stored.field_name == column.name:
            return stored
        return stored.clone(field_name=column.name)

    fields = fields or FieldFactory()
    descriptor = _infer(column.type, fields, primary_key=bool(column.primary_key))
    # keep the column's own type instance (dialect variants, AutoString)
    descriptor = descriptor.model_copy(update={"sa_type": column.type})
    overrides: dict[str, Any] = {"field_name": column.name}
    if column.primary_key:
        overrides["primary_key"] = True
    if column.autoincrement is True:
        overrides["auto_increment"] = True
    if column.nullable is False:
        overrides["allow_null"] = False
    if column.comment:
        overrides["comment"] = column.comment
    if column.default is not None and getattr(column.default, "is_scalar", False):
        overrides["default_value"] = column.default.arg
    return descriptor.clone(overrides)


def _infer(sa_type: TypeEngine, fields: FieldFactory, primary_key: bool = False) -> FieldDescriptor:
    if isinstance(sa_type, sa_types.TypeDecorator):
        # e.g. SQLModel's AutoString wraps String
        return _infer(sa_type.impl_instance, fields, primary_key=primary_key)
    if isinstance(sa_type, sa_types.Enum):
        return fields.ENUM(list(sa_type.enums))
    if isinstance(sa_type, sa_types.ARRAY):
        return fields.ARRAY(_infer(sa_type.item_type, fields))
    if isinstance(sa_type, sa_types.Boolean):
        return fields.BOOLEAN()
    if isinstance(sa_type, sa_types.Integer):
        return fields.INTEGER(primary_key=primary_key)
    if isinstance(sa_type, sa_types.Numeric):
        return fields.FLOAT()
    if isinstance(sa_type, sa_types.Text):
        return fields.TEXT()
    if isinstance(sa_type, sa_types.String):
        return fields.STRING(sa_type.length) if sa_type.length is not None else fields.STRING()
    if isinstance(sa_type, (sa_types.DateTime, sa_types.Date)):
        return fields.DATE()
    if isinstance(sa_type, sa_types.Uuid):
        return fields.UUID()
    return fields.CUSTOM(type(sa_type).__name__.lower(), sa_type)


def source_from_mapped_class(mapped: type, fields: FieldFactory | None = None) -> ModelSource:
    """Build a ModelSource from a SQLAlchemy or SQLModel mapped class.

    The model is named after its table. Column attributes become descriptors
    keyed by attribute name; relationships become associations.
    """
    mapper = inspect(mapped, raiseerr=False)
    if mapper is None or not hasattr(mapper, "column_attrs"):
        raise InvalidArgumentError(f"{mapped!r} is not a mapped class")

    attributes = {prop.key: descriptor_from_column(prop.columns[0], fields) for prop in mapper.column_attrs}
    relationships = [
        (relationship.key, relationship.mapper.local_table.name, bool(relationship.uselist))
        for relationship in mapper.relationships
    ]

    def associate(model: ModelDefinition, models: Any) -> None:
        for key, target, many in relationships:
            model.associate(key, target, many=many)

    return ModelSource(
        name=mapper.local_table.name,
        attributes=attributes,
        associate=associate if relationships else None,
    )

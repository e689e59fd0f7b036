"""Unit tests for the descriptor and column bridge."""

import pytest
from sqlalchemy import Column, Enum, Integer, LargeBinary, Numeric, String, Text
from sqlalchemy import types as sa_types

from fieldkit import fields
from fieldkit.errors import InvalidArgumentError
from fieldkit.models.enums import FieldKind
from fieldkit.services.columns import (
    FIELD_INFO_KEY,
    build_column,
    descriptor_from_column,
    source_from_mapped_class,
)
from fieldkit.services.validation import INT32_MAX


class TestBuildColumn:
    """Tests for building columns from descriptors."""

    def test_string_column(self) -> None:
        descriptor = fields.STRING(10, allow_null=False, comment="Title")

        column = build_column(descriptor, "title")

        assert column.name == "title"
        assert isinstance(column.type, sa_types.String)
        assert column.type.length == 10
        assert column.nullable is False
        assert column.comment == "Title"
        assert column.info[FIELD_INFO_KEY] is descriptor

    def test_primary_key_column(self) -> None:
        column = fields.ID().column("id")

        assert column.primary_key is True
        assert column.autoincrement is True
        assert column.nullable is False

    def test_uses_field_name(self) -> None:
        column = fields.STRING(field_name="book_title").column()

        assert column.name == "book_title"

    def test_nullable_left_to_sqlalchemy(self) -> None:
        column = fields.STRING().column("title")

        assert column.nullable is True

    def test_default_value(self) -> None:
        column = fields.PAGE().column("page")

        assert column.default.arg == 1

    def test_enum_type_is_not_shared(self) -> None:
        descriptor = fields.ENUM(["A", "B"])

        column = descriptor.column("status")

        assert column.type is not descriptor.sa_type
        assert list(column.type.enums) == ["A", "B"]


class TestDescriptorFromColumn:
    """Tests for reading descriptors back from columns."""

    def test_returns_stored_descriptor(self) -> None:
        descriptor = fields.STRING(10, comment="Title")

        result = descriptor_from_column(build_column(descriptor, "title"))

        assert result.comment == "Title"
        assert result.field_name == "title"
        assert result.validation == {"len": [0, 10]}

    def test_stored_descriptor_with_same_name_is_returned_as_is(self) -> None:
        descriptor = fields.STRING(field_name="title")

        assert descriptor_from_column(descriptor.column()) is descriptor

    def test_infers_integer(self) -> None:
        result = descriptor_from_column(Column("count", Integer, nullable=False))

        assert result.kind == FieldKind.INTEGER
        assert result.field_name == "count"
        assert result.allow_null is False
        assert result.validation == {"is_int": True, "min": 0, "max": INT32_MAX}

    def test_infers_primary_key(self) -> None:
        result = descriptor_from_column(Column("id", Integer, primary_key=True, autoincrement=True))

        assert result.primary_key is True
        assert result.auto_increment is True
        assert result.validation["min"] == 1

    def test_infers_string_length(self) -> None:
        result = descriptor_from_column(Column("name", String(20), comment="Name", default="anon"))

        assert result.kind == FieldKind.STRING
        assert result.length == 20
        assert result.comment == "Name"
        assert result.default_value == "anon"
        assert result.allow_null is None

    def test_infers_text_float_and_enum(self) -> None:
        assert descriptor_from_column(Column("body", Text)).kind == FieldKind.TEXT
        assert descriptor_from_column(Column("price", Numeric(10, 2))).kind == FieldKind.FLOAT

        status = descriptor_from_column(Column("status", Enum("a", "b", name="status")))
        assert status.kind == FieldKind.ENUM
        assert status.values == ("a", "b")

    def test_keeps_column_type_instance(self) -> None:
        column = Column("name", String(20))

        result = descriptor_from_column(column)

        assert result.sa_type is column.type
        assert result.validation == {"len": [0, 20]}

    def test_unknown_type_becomes_custom(self) -> None:
        result = descriptor_from_column(Column("blob", LargeBinary))

        assert result.kind == "largebinary"
        assert result.validation == {}


class TestSourceFromMappedClass:
    """Tests for mapped class inspection errors."""

    def test_rejects_unmapped_class(self) -> None:
        class Plain:
            pass

        with pytest.raises(InvalidArgumentError):
            source_from_mapped_class(Plain)

"""Tests for the FieldFactory constructors."""

import pytest
from sqlalchemy import types as sa_types

from fieldkit.errors import InvalidArgumentError
from fieldkit.models.descriptor import DISABLED, FieldDescriptor, is_descriptor
from fieldkit.models.enums import FieldKind
from fieldkit.models.reference import THIS
from fieldkit.services.factory import FieldFactory
from fieldkit.services.registry import NamedFieldRegistry
from fieldkit.services.validation import INT32_MAX, ElementValidator


@pytest.fixture
def fields() -> FieldFactory:
    return FieldFactory(NamedFieldRegistry())


class TestID:
    """Tests for the primary key constructor."""

    def test_defaults(self, fields: FieldFactory) -> None:
        field = fields.ID()

        assert field.kind == FieldKind.ID
        assert isinstance(field.sa_type, sa_types.Integer)
        assert field.primary_key is True
        assert field.auto_increment is True
        assert field.allow_null is False
        assert field.validation == {"is_int": True, "min": 1, "max": 2147483647}

    def test_structural_flags_cannot_be_relaxed(self, fields: FieldFactory) -> None:
        field = fields.ID(primary_key=False, allow_null=True)

        assert field.primary_key is True
        assert field.allow_null is False

    def test_properties_and_disabled_validation(self, fields: FieldFactory) -> None:
        field = fields.ID({"comment": "ID field", "validation": DISABLED})

        assert field.comment == "ID field"
        assert field.validation is None

    def test_flags_can_change_through_clone(self, fields: FieldFactory) -> None:
        field = fields.CLONE(fields.ID(), allow_null=True)

        assert field.allow_null is True
        assert field.primary_key is True


class TestSTRING:
    """Tests for the bounded string constructor and its call shapes."""

    def test_no_arguments_uses_default_length(self, fields: FieldFactory) -> None:
        field = fields.STRING()

        assert field.kind == FieldKind.STRING
        assert field.length == 255
        assert field.sa_type.length == 255
        assert field.validation == {"len": [0, 255]}

    def test_integer_argument_is_length(self, fields: FieldFactory) -> None:
        field = fields.STRING(10)

        assert field.length == 10
        assert field.sa_type.length == 10
        assert field.validation["len"] == [0, 10]

    def test_mapping_argument_is_properties(self, fields: FieldFactory) -> None:
        field = fields.STRING({"comment": "x"})

        assert field.length == 255
        assert field.comment == "x"

    def test_length_and_disabled_validation(self, fields: FieldFactory) -> None:
        field = fields.STRING(10, {"validation": DISABLED})

        assert field.length == 10
        assert field.validation is None

    def test_keywords_override_properties(self, fields: FieldFactory) -> None:
        field = fields.STRING(10, {"comment": "first"}, comment="second")

        assert field.comment == "second"

    def test_custom_rule_replaces_default(self, fields: FieldFactory) -> None:
        field = fields.STRING(100, validation={"len": [3, 100], "is_email": True})

        assert field.validation == {"len": [3, 100], "is_email": True}

    def test_rejects_negative_length(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError, match="negative"):
            fields.STRING(-1)

    def test_rejects_boolean_length(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.STRING(True)

    def test_rejects_properties_twice(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.STRING({"comment": "a"}, {"comment": "b"})


class TestNumericConstructors:
    """Tests for INTEGER and FLOAT."""

    def test_integer_defaults(self, fields: FieldFactory) -> None:
        field = fields.INTEGER()

        assert field.kind == FieldKind.INTEGER
        assert field.validation == {"is_int": True, "min": 0, "max": INT32_MAX}
        assert field.primary_key is False

    def test_integer_primary_key_forces_min_one(self, fields: FieldFactory) -> None:
        field = fields.INTEGER(primary_key=True)

        assert field.validation["min"] == 1

    def test_integer_custom_rules_keep_other_defaults(self, fields: FieldFactory) -> None:
        field = fields.INTEGER(validation={"min": 5})

        assert field.validation == {"is_int": True, "min": 5, "max": INT32_MAX}

    def test_float_defaults(self, fields: FieldFactory) -> None:
        field = fields.FLOAT()

        assert isinstance(field.sa_type, sa_types.Float)
        assert field.validation == {"is_float": True, "min": 0.0, "max": 1.0e308}


class TestENUM:
    """Tests for the enumerated set constructor."""

    def test_values_become_is_in_rule(self, fields: FieldFactory) -> None:
        field = fields.ENUM(["A", "B"])

        assert field.kind == FieldKind.ENUM
        assert field.values == ("A", "B")
        assert list(field.sa_type.enums) == ["A", "B"]
        assert field.validation == {"is_in": ["A", "B"]}

    @pytest.mark.parametrize("values", [[], (), "AB", None, ["A", 1]])
    def test_rejects_invalid_values(self, fields: FieldFactory, values: object) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.ENUM(values)


class TestARRAY:
    """Tests for the typed array constructor."""

    def test_element_kind_with_length(self, fields: FieldFactory) -> None:
        field = fields.ARRAY(FieldKind.STRING, length=5)

        assert field.kind == FieldKind.ARRAY
        assert field.element.kind == FieldKind.STRING
        assert field.element.length == 5
        assert isinstance(field.sa_type, sa_types.ARRAY)
        assert isinstance(field.validation["is_array"], ElementValidator)

    def test_element_descriptor(self, fields: FieldFactory) -> None:
        element = fields.INTEGER(validation={"max": 10})
        field = fields.ARRAY(element)

        assert field.element.validation["max"] == 10

    def test_rejects_negative_length(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.ARRAY(FieldKind.STRING, length=-3)

    def test_rejects_non_descriptor_element(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.ARRAY({"kind": "string"})

    def test_rejects_nested_arrays(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.ARRAY(fields.ARRAY(FieldKind.INTEGER))

    def test_disabled_validation(self, fields: FieldFactory) -> None:
        field = fields.ARRAY(FieldKind.INTEGER, validation=DISABLED)

        assert field.validation is None


class TestOtherKinds:
    """Tests for TEXT, BOOLEAN, DATE, UUID and CUSTOM."""

    def test_text_has_no_default_rules(self, fields: FieldFactory) -> None:
        assert fields.TEXT().validation == {}

    def test_boolean_date_uuid_defaults(self, fields: FieldFactory) -> None:
        assert fields.BOOLEAN().validation == {"is_boolean": True}
        assert fields.DATE().validation == {"is_date": True}
        assert fields.UUID().validation == {"is_uuid": True}

    def test_custom_kind(self, fields: FieldFactory) -> None:
        field = fields.CUSTOM("json", sa_types.JSON(), comment="payload")

        assert field.kind == "json"
        assert field.validation == {}
        assert field.comment == "payload"

    def test_custom_requires_sqlalchemy_type(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.CUSTOM("json", dict)


class TestPropertyChecks:
    """Tests for property validation shared by every constructor."""

    def test_rejects_unknown_property(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError, match="bogus"):
            fields.INTEGER(bogus=1)

    def test_rejects_structural_property(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError, match="length"):
            fields.INTEGER(length=3)

    def test_rejects_non_mapping_properties(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.FLOAT(["comment"])

    def test_extra_metadata(self, fields: FieldFactory) -> None:
        field = fields.STRING(example="admin", extra={"label": "User"})

        assert field.example == "admin"
        assert field.extra == {"label": "User"}


class TestIsDescriptor:
    """Tests for descriptor recognition."""

    def test_factory_output_is_descriptor(self, fields: FieldFactory) -> None:
        assert is_descriptor(fields.INTEGER())
        assert isinstance(fields.INTEGER(), FieldDescriptor)

    def test_plain_objects_are_not_descriptors(self) -> None:
        assert not is_descriptor({})
        assert not is_descriptor(None)
        assert not is_descriptor({"kind": "integer", "validation": {}})

    def test_self_reference_is_not_descriptor(self) -> None:
        assert not is_descriptor(THIS())


class TestCLONE:
    """Tests for clone-with-override."""

    def test_does_not_mutate_source(self, fields: FieldFactory) -> None:
        source = fields.STRING(10)

        copy = fields.CLONE(source, {"allow_null": False})

        assert source.allow_null is None
        assert copy.allow_null is False
        assert copy.length == 10

    def test_copy_does_not_share_validation(self, fields: FieldFactory) -> None:
        source = fields.STRING(10)

        copy = fields.CLONE(source)
        copy.validation["len"].append(99)

        assert source.validation["len"] == [0, 10]

    def test_rejects_non_descriptor(self, fields: FieldFactory) -> None:
        with pytest.raises(InvalidArgumentError):
            fields.CLONE({"kind": "integer"})

    def test_rejects_structural_changes(self, fields: FieldFactory) -> None:
        tags = fields.ARRAY(FieldKind.STRING, length=5)

        with pytest.raises(InvalidArgumentError, match="element"):
            fields.CLONE(tags, element=fields.STRING(50))
        with pytest.raises(InvalidArgumentError, match="length"):
            fields.CLONE(fields.STRING(10), length=50)

    def test_template_rejects_structural_changes(self, fields: FieldFactory) -> None:
        fields.add("CODE", fields.STRING(8))

        with pytest.raises(InvalidArgumentError, match="length"):
            fields.CODE(length=50)


class TestTemplates:
    """Tests for registry-backed attribute access."""

    def test_add_and_invoke_by_attribute(self, fields: FieldFactory) -> None:
        fields.add("FOO", fields.STRING(20))

        field = fields.FOO(allow_null=True)

        assert field.kind == FieldKind.STRING
        assert field.length == 20
        assert field.allow_null is True

    def test_unknown_template_is_attribute_error(self, fields: FieldFactory) -> None:
        with pytest.raises(AttributeError):
            fields.MISSING

    def test_default_factory_reaches_builtins(self) -> None:
        from fieldkit import fields as default_fields

        page = default_fields.PAGE()

        assert page.default_value == 1
        assert page.validation["min"] == 1

    def test_underscore_templates(self) -> None:
        from fieldkit import fields as default_fields

        assert default_fields._CREATED_AT().kind == FieldKind.DATE
        assert default_fields._STATUS().default_value == "ACTIVE"

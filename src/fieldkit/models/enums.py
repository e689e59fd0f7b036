from enum import StrEnum


class FieldKind(StrEnum):
    ID = "id"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    TEXT = "text"
    ENUM = "enum"
    ARRAY = "array"
    BOOLEAN = "boolean"
    DATE = "date"
    UUID = "uuid"

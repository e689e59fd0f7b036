from fieldkit.models.base import FrozenModel


class ContainerConfig(FrozenModel):
    """Settings for a FieldContainer.

    Attributes:
        underscored: Derive snake_case storage names from camelCase attribute
            names when a descriptor has no ``field_name``.
        schema_name: Database schema for the container's tables.
    """

    underscored: bool = True
    schema_name: str | None = None

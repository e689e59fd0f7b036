"""Named field templates.

A NamedFieldRegistry maps short uppercase names to template descriptors.
Invoking a name clones the template with overrides applied. Names can be
registered once; registering an existing name raises DuplicateNameError.

Registration is a setup step. Once it is done, templates are only read and
cloned, so a populated registry can be shared freely.
"""

from typing import Any, Iterator, Mapping

import structlog

from fieldkit.errors import DuplicateNameError, InvalidArgumentError, UnknownNameError
from fieldkit.models.base import ensure_identifier
from fieldkit.models.descriptor import FieldDescriptor


class NamedFieldRegistry:
    """Registry of reusable field templates."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._templates: dict[str, FieldDescriptor] = {}
        self._logger = logger or structlog.get_logger(__name__)

    def register(self, name: str, template: FieldDescriptor) -> None:
        """Register ``template`` under ``name``.

        Raises:
            InvalidArgumentError: If the name is not an identifier or the
                template is not a FieldDescriptor.
            DuplicateNameError: If the name is already registered.
        """
        self._store(name, template)
        self._logger.debug("field_template_registered", name=name, kind=str(template.kind))

    def invoke(self, name: str, overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> FieldDescriptor:
        """Return a new descriptor cloned from the template ``name``."""
        return self.get(name).clone(overrides, **kwargs)

    def get(self, name: str) -> FieldDescriptor:
        try:
            return self._templates[name]
        except KeyError:
            raise UnknownNameError(name) from None

    def names(self) -> list[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def _store(self, name: str, template: FieldDescriptor) -> None:
        ensure_identifier(name, "template name")
        if not isinstance(template, FieldDescriptor):
            raise InvalidArgumentError(f"template '{name}' must be a FieldDescriptor")
        if name in self._templates:
            raise DuplicateNameError(name)
        self._templates[name] = template.clone()


def register_builtin_fields(registry: NamedFieldRegistry) -> NamedFieldRegistry:
    """Register the built-in primary key, audit, query and auth templates.

    Registration is silent: this runs when the package is imported, before
    any logging is configured.
    """
    from fieldkit.services.factory import FieldFactory

    fields = FieldFactory(registry)
    add = registry._store

    # primary keys
    add("PK_INTEGER", fields.INTEGER(primary_key=True, allow_null=False))
    add("PK_UUID", fields.UUID(primary_key=True, allow_null=False))

    # audit
    add("_CREATED_AT", fields.DATE(comment="Record creation date."))
    add("_UPDATED_AT", fields.DATE(comment="Record modification date."))
    add("_DELETED_AT", fields.DATE(comment="Record deletion date."))
    add("_CREATED_USER", fields.INTEGER(comment="ID of the user that created the record."))
    add("_UPDATED_USER", fields.INTEGER(comment="ID of the user that modified the record."))
    add("_DELETED_USER", fields.INTEGER(comment="ID of the user that deleted the record."))
    add(
        "_STATUS",
        fields.ENUM(
            ["ACTIVE", "INACTIVE", "DELETED"],
            comment="Current status of the record.",
            default_value="ACTIVE",
        ),
    )

    # filters and queries
    add(
        "FIELDS",
        fields.STRING(comment="Fields to return in the result.", example="id_user,username,person(id_person,name)"),
    )
    add("ORDER", fields.STRING(comment="Sort order of the result.", example="last_name,-first_name"))
    add(
        "LIMIT",
        fields.INTEGER(comment="Maximum number of records per page.", default_value=50, validation={"min": 1}),
    )
    add(
        "PAGE",
        fields.INTEGER(comment="Page number of a record list.", default_value=1, validation={"min": 1}),
    )

    # authentication
    add(
        "BASIC_AUTHORIZATION",
        fields.TEXT(comment="Access credentials: Basic base64(username:password).", example="Basic FDS234SF=="),
    )
    add(
        "BEARER_AUTHORIZATION",
        fields.TEXT(comment="Access credentials: Bearer <access token>.", example="Bearer s83hs7.sdf423.f23f"),
    )
    add("ACCESS_TOKEN", fields.TEXT(comment="Access token.", example="s83hs7.sdf423.f23f"))
    add("REFRESH_TOKEN", fields.TEXT(comment="Refresh token.", example="s83hs7.sdf423.f23f"))
    add("TOKEN_EXPIRATION_DATE", fields.DATE(comment="Token expiration date."))
    add("TOKEN_EXPIRE_IN", fields.INTEGER(comment="Token lifetime in seconds.", example="86400"))
    add("TOKEN_TYPE", fields.STRING(comment="Token type.", example="Bearer"))
    add(
        "ACCESS_TYPE",
        fields.ENUM(
            ["offline", "online"],
            comment="Access type. 'offline' also returns a refresh token.",
            default_value="online",
        ),
    )
    add(
        "USERNAME",
        fields.STRING(100, comment="User name.", example="admin", validation={"len": [3, 100]}),
    )
    add(
        "PASSWORD",
        fields.STRING(50, comment="User password.", example="123", validation={"len": [3, 50]}),
    )

    # other
    add(
        "EMAIL",
        fields.STRING(comment="Email address.", example="someone@example.com", validation={"is_email": True}),
    )
    return registry


default_registry = register_builtin_fields(NamedFieldRegistry())


__all__ = ["NamedFieldRegistry", "default_registry", "register_builtin_fields"]

"""Field container: the models whose attributes THIS references resolve to.

A container is an explicit object, not global state. Models are added during
setup with :meth:`FieldContainer.define` or one of the import methods and are
never removed. Each model also gets a SQLAlchemy ``Table`` in the container's
own ``MetaData``; the container never touches a database.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import structlog
from sqlalchemy import MetaData, Table

from fieldkit.errors import DuplicateModelError, InvalidArgumentError, UnknownModelError
from fieldkit.models.base import ensure_identifier, to_snake_case
from fieldkit.models.config import ContainerConfig
from fieldkit.models.definition import ModelDefinition, ModelSource
from fieldkit.models.descriptor import FieldDescriptor
from fieldkit.models.reference import THIS
from fieldkit.services.columns import build_column, source_from_mapped_class
from fieldkit.services.factory import FieldFactory
from fieldkit.services.model_loader import load_model_sources
from fieldkit.services.resolver import resolve


class FieldContainer:
    """Holds model definitions and resolves THIS references against them."""

    THIS = staticmethod(THIS)

    def __init__(
        self,
        config: ContainerConfig | None = None,
        fields: FieldFactory | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config or ContainerConfig()
        self._fields = fields or FieldFactory()
        self._logger = logger or structlog.get_logger(__name__)
        self._models: dict[str, ModelDefinition] = {}
        self._tables: dict[str, Table] = {}
        self._metadata = MetaData(schema=self._config.schema_name)

    @property
    def config(self) -> ContainerConfig:
        return self._config

    @property
    def metadata(self) -> MetaData:
        return self._metadata

    @property
    def models(self) -> Mapping[str, ModelDefinition]:
        return MappingProxyType(self._models)

    def table(self, model_name: str) -> Table:
        try:
            return self._tables[model_name]
        except KeyError:
            raise UnknownModelError(model_name) from None

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def define(
        self,
        model_name: str,
        attributes: Mapping[str, FieldDescriptor],
        associations: Mapping[str, str] | None = None,
    ) -> ModelDefinition:
        """Define a model from an attribute map.

        Args:
            model_name: Unique model name within this container.
            attributes: Attribute name to descriptor.
            associations: Association name to target model name.

        Returns:
            The new ModelDefinition.

        Raises:
            DuplicateModelError: If the model is already defined.
            InvalidArgumentError: If an attribute is not a FieldDescriptor.
        """
        if model_name in self._models:
            raise DuplicateModelError(model_name)
        model = self._prepare(model_name, attributes)
        for name, target in (associations or {}).items():
            model.associate(name, target)
        self._add(model)
        self._logger.info(
            "model_defined",
            model=model_name,
            attribute_count=len(model.attributes),
            association_count=len(model.associations),
        )
        return model

    def import_models(self, sources: Iterable[ModelSource]) -> list[ModelDefinition]:
        """Define every source, then run each source's associate callback.

        Associations that cross models of this import are wired only after all
        of them are defined. Nothing is defined if any source is invalid.
        """
        sources = list(sources)
        seen: set[str] = set()
        for source in sources:
            if not isinstance(source, ModelSource):
                raise InvalidArgumentError(f"expected a ModelSource, got {type(source).__name__}")
            if source.name in self._models or source.name in seen:
                raise DuplicateModelError(source.name)
            seen.add(source.name)

        prepared = [(self._prepare(source.name, source.attributes), source) for source in sources]
        for model, _ in prepared:
            self._add(model)

        models = self.models
        for model, source in prepared:
            if source.associate is not None:
                source.associate(model, models)

        self._logger.info("models_imported", models=[model.name for model, _ in prepared])
        return [model for model, _ in prepared]

    def import_declarative(self, *mapped_classes: type) -> list[ModelDefinition]:
        """Import SQLAlchemy or SQLModel mapped classes."""
        return self.import_models([source_from_mapped_class(cls, self._fields) for cls in mapped_classes])

    def import_path(self, directory: Path | str, suffix: str = "_model.py") -> list[ModelDefinition]:
        """Import every model file under ``directory``."""
        sources = load_model_sources(Path(directory), suffix=suffix, logger=self._logger)
        return self.import_models(sources)

    def group(self, model_name: str, tree: Mapping[str, Any] | list[Any]) -> Any:
        """Resolve the THIS references of ``tree`` with ``model_name`` as root."""
        if model_name not in self._models:
            raise UnknownModelError(model_name)
        result = resolve(self._models, model_name, tree)
        self._logger.debug("group_resolved", model=model_name)
        return result

    def _prepare(self, model_name: str, attributes: Mapping[str, FieldDescriptor]) -> ModelDefinition:
        ensure_identifier(model_name, "model name")
        if not isinstance(attributes, Mapping):
            raise InvalidArgumentError(f"attributes of model '{model_name}' must be a mapping")

        prepared: dict[str, FieldDescriptor] = {}
        column_names: set[str] = set()
        for key, descriptor in attributes.items():
            ensure_identifier(key, "attribute name")
            if not isinstance(descriptor, FieldDescriptor):
                raise InvalidArgumentError(f"attribute '{key}' of model '{model_name}' is not a FieldDescriptor")
            if descriptor.field_name is None:
                descriptor = descriptor.clone(field_name=self._column_name(key))
            if descriptor.field_name in column_names:
                raise InvalidArgumentError(f"column '{descriptor.field_name}' is used twice in model '{model_name}'")
            column_names.add(descriptor.field_name)
            prepared[key] = descriptor
        return ModelDefinition(model_name, prepared)

    def _add(self, model: ModelDefinition) -> None:
        columns = [build_column(descriptor) for descriptor in model.attributes.values()]
        self._tables[model.name] = Table(model.name, self._metadata, *columns)
        self._models[model.name] = model

    def _column_name(self, attribute: str) -> str:
        return to_snake_case(attribute) if self._config.underscored else attribute

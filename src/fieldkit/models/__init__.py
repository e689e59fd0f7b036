from fieldkit.models.config import ContainerConfig
from fieldkit.models.definition import Association, ModelDefinition, ModelSource
from fieldkit.models.descriptor import DISABLED, FieldDescriptor, is_descriptor
from fieldkit.models.enums import FieldKind
from fieldkit.models.reference import THIS, SelfReference, is_self_reference

__all__ = [
    "Association",
    "ContainerConfig",
    "DISABLED",
    "FieldDescriptor",
    "FieldKind",
    "ModelDefinition",
    "ModelSource",
    "SelfReference",
    "THIS",
    "is_descriptor",
    "is_self_reference",
]

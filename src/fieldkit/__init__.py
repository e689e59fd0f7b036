"""fieldkit - validated field descriptors and THIS references for SQLAlchemy models."""

from importlib.metadata import version, PackageNotFoundError

from fieldkit.models.descriptor import DISABLED, FieldDescriptor, is_descriptor
from fieldkit.models.reference import THIS, SelfReference, is_self_reference
from fieldkit.services.container import FieldContainer
from fieldkit.services.factory import FieldFactory
from fieldkit.services.registry import NamedFieldRegistry, default_registry

try:
    __version__ = version("fieldkit")
except PackageNotFoundError:
    __version__ = "unknown"

fields = FieldFactory(default_registry)

__all__ = [
    "__version__",
    "DISABLED",
    "FieldContainer",
    "FieldDescriptor",
    "FieldFactory",
    "NamedFieldRegistry",
    "SelfReference",
    "THIS",
    "default_registry",
    "fields",
    "is_descriptor",
    "is_self_reference",
]

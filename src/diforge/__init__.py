from diforge.binder import BoundArguments, ParameterBinder
from diforge.config import ContainerRules
from diforge.container import Container
from diforge.exceptions import (
    DIForgeConstructionError,
    DIForgeCycleDetectedError,
    DIForgeError,
    DIForgeInvalidRegistrationError,
    DIForgeMissingParameterError,
    DIForgeNotFoundError,
)
from diforge.lock_mode import LockMode
from diforge.markers import INSTANCE_OF, PARAMS, InstanceOf
from diforge.metadata import InspectMetadataProvider, MetadataProvider, ParameterDescriptor

__all__ = [
    "INSTANCE_OF",
    "PARAMS",
    "BoundArguments",
    "Container",
    "ContainerRules",
    "DIForgeConstructionError",
    "DIForgeCycleDetectedError",
    "DIForgeError",
    "DIForgeInvalidRegistrationError",
    "DIForgeMissingParameterError",
    "DIForgeNotFoundError",
    "InspectMetadataProvider",
    "InstanceOf",
    "LockMode",
    "MetadataProvider",
    "ParameterBinder",
    "ParameterDescriptor",
]

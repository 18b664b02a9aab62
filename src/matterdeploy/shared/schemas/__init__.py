"""Shared Pydantic schemas for matterdeploy.

- descriptor: the deployment descriptor and its nested configuration blocks
- validation: validation error records
"""

from .descriptor import (
    DatabaseConfig,
    DeploymentDescriptor,
    EnvVar,
    IngressConfig,
    PersistenceConfig,
    PortMapping,
    RegistryCredentials,
    RenderTarget,
    ResourceLimits,
    SecretRef,
    ServiceConfig,
    ServiceRole,
)
from .validation import ValidationError, ValidationErrorKind

__all__ = [
    # Descriptor schemas
    "DeploymentDescriptor",
    "DatabaseConfig",
    "ServiceConfig",
    "ServiceRole",
    "RenderTarget",
    "ResourceLimits",
    "PortMapping",
    "EnvVar",
    "SecretRef",
    "IngressConfig",
    "RegistryCredentials",
    "PersistenceConfig",
    # Validation schemas
    "ValidationError",
    "ValidationErrorKind",
]

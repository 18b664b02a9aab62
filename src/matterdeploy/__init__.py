"""matterdeploy: validate Matter AI deployment descriptors and render them as
Docker Compose files or Helm values files."""

from .deployment import (
    ContractViolation,
    DescriptorValidator,
    ValidatedDescriptor,
    ValidationResult,
    render_compose,
    render_helm_values,
    validate,
)
from .shared.schemas import DeploymentDescriptor, RenderTarget, ValidationError, ValidationErrorKind

__version__ = "0.1.0"

__all__ = [
    "DeploymentDescriptor",
    "RenderTarget",
    "DescriptorValidator",
    "ValidatedDescriptor",
    "ValidationResult",
    "ValidationError",
    "ValidationErrorKind",
    "ContractViolation",
    "validate",
    "render_compose",
    "render_helm_values",
]

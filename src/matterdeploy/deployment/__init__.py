"""Deployment core: descriptor validation and document rendering."""

from ..shared.schemas import RenderTarget
from .compose import ComposeRenderer, render_compose
from .errors import ContractViolation, DescriptorLoadError, DescriptorValidationFailed
from .helm import HelmValuesRenderer, render_helm_values
from .loader import descriptor_from_dict, load_descriptor
from .validator import DescriptorValidator, ValidatedDescriptor, ValidationResult, validate

RENDERERS = {
    RenderTarget.COMPOSE: ComposeRenderer,
    RenderTarget.HELM: HelmValuesRenderer,
}

__all__ = [
    "DescriptorValidator",
    "ValidatedDescriptor",
    "ValidationResult",
    "validate",
    "ComposeRenderer",
    "HelmValuesRenderer",
    "RENDERERS",
    "render_compose",
    "render_helm_values",
    "load_descriptor",
    "descriptor_from_dict",
    "ContractViolation",
    "DescriptorValidationFailed",
    "DescriptorLoadError",
]

"""Configuration Service facade.

Provides a high-level interface for validating descriptors, rendering deployment
documents and writing them to disk. The deployment core stays pure; this is the
layer that does I/O.
"""

import logging
import os
from pathlib import Path

from ..deployment import RENDERERS, DescriptorValidator, ValidationResult
from ..deployment.base import BaseRenderer
from ..shared.schemas import DeploymentDescriptor, RenderTarget
from .validator import YAMLValidator

logger = logging.getLogger(__name__)

OUTPUT_FILENAMES = {
    RenderTarget.COMPOSE: "docker-compose.yml",
    RenderTarget.HELM: "values.yaml",
}


class ConfigurationService:
    """High-level service for generating deployment configurations."""

    def __init__(self, output_dir: str | None = None):
        """
        Initialize the Configuration Service.

        Args:
            output_dir: Directory to write rendered files
                (default: $MATTERDEPLOY_OUTPUT_DIR or generated_configs/)
        """
        self.output_dir = Path(output_dir or os.getenv("MATTERDEPLOY_OUTPUT_DIR", "generated_configs"))
        self.descriptor_validator = DescriptorValidator()
        self.yaml_validator = YAMLValidator()
        self.renderers: dict[RenderTarget, BaseRenderer] = {
            target: renderer_cls() for target, renderer_cls in RENDERERS.items()
        }

    def validate(
        self,
        descriptor: DeploymentDescriptor,
        target: RenderTarget | None = None,
    ) -> ValidationResult:
        """Validate a descriptor for one target, or for every target when None."""
        return self.descriptor_validator.validate(descriptor, target)

    def render(self, descriptor: DeploymentDescriptor, target: RenderTarget) -> str:
        """
        Validate and render one document.

        Args:
            descriptor: The deployment descriptor
            target: Output format

        Returns:
            Rendered document text

        Raises:
            DescriptorValidationFailed: If the descriptor is invalid
            ValueError: If the rendered document fails the YAML checks
        """
        target = RenderTarget(target)
        validated = self.validate(descriptor, target).raise_for_errors()
        content = self.renderers[target].render(validated)
        self._check_rendered(content, target)
        return content

    def generate(self, descriptor: DeploymentDescriptor, target: RenderTarget) -> dict:
        """
        Render one document without writing it.

        Returns:
            Dictionary with target, filename and content
        """
        target = RenderTarget(target)
        content = self.render(descriptor, target)
        return {
            "target": target.value,
            "filename": OUTPUT_FILENAMES[target],
            "content": content,
        }

    def write_bundle(self, descriptor: DeploymentDescriptor, output_dir: str | None = None) -> dict:
        """
        Render both documents and write them under <output_dir>/<namespace>/.

        The descriptor is validated once against the rules of every target.

        Returns:
            Dictionary with namespace, output directory and file paths per target

        Raises:
            DescriptorValidationFailed: If the descriptor is invalid
            ValueError: If a rendered document fails the YAML checks
        """
        validated = self.validate(descriptor).raise_for_errors()
        namespace = descriptor.namespace
        bundle_dir = Path(output_dir) if output_dir else self.output_dir / namespace
        bundle_dir.mkdir(parents=True, exist_ok=True)

        files = {}
        for target, renderer in self.renderers.items():
            content = renderer.render(validated)
            self._check_rendered(content, target)

            output_path = bundle_dir / OUTPUT_FILENAMES[target]
            with open(output_path, "w") as f:
                f.write(content)

            files[target.value] = str(output_path)
            logger.info(f"Generated {target.value}: {output_path}")

        return {
            "namespace": namespace,
            "output_dir": str(bundle_dir),
            "files": files,
        }

    def _check_rendered(self, content: str, target: RenderTarget):
        is_valid, errors = self.yaml_validator.validate_yaml(content, target)
        if not is_valid:
            error_msg = "\n".join(errors)
            raise ValueError(f"Rendered {target.value} document failed validation:\n{error_msg}")

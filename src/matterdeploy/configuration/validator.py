"""YAML checks for rendered deployment documents."""

import logging
from pathlib import Path
from typing import Any

import yaml

from ..shared.schemas import RenderTarget

logger = logging.getLogger(__name__)


class YAMLValidator:
    """Validate rendered Compose and Helm documents."""

    # Required top-level and nested fields for a Compose document
    COMPOSE_REQUIRED_FIELDS = [
        "services",
        "networks",
        "volumes",
    ]

    # Required fields for a Helm values document
    HELM_REQUIRED_FIELDS = [
        "global",
        "global.namespace",
        "components",
        "persistence.postgres",
        "secrets.postgres",
    ]

    def _get_nested_field(self, data: dict[str, Any], field_path: str) -> Any | None:
        """
        Get nested field from dictionary using dot notation.

        Args:
            data: Dictionary to search
            field_path: Dot-separated field path (e.g., "persistence.postgres")

        Returns:
            Field value if found, None otherwise
        """
        current = data
        for part in field_path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return None
        return current

    def _required_fields(self, target: RenderTarget) -> list[str]:
        if RenderTarget(target) == RenderTarget.COMPOSE:
            return self.COMPOSE_REQUIRED_FIELDS
        return self.HELM_REQUIRED_FIELDS

    def validate_yaml(self, yaml_content: str, target: RenderTarget) -> tuple[bool, list[str]]:
        """
        Validate rendered YAML content.

        Args:
            yaml_content: Rendered document
            target: Target the document was rendered for

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            return False, [f"Invalid YAML syntax: {e}"]

        if not isinstance(data, dict):
            return False, ["Rendered document is not a YAML mapping"]

        errors = [
            f"Missing required field: {field}"
            for field in self._required_fields(target)
            if self._get_nested_field(data, field) is None
        ]

        if RenderTarget(target) == RenderTarget.COMPOSE:
            services = data.get("services") or {}
            for name, service in services.items():
                if not isinstance(service, dict) or not service.get("image"):
                    errors.append(f"Service '{name}' has no image")

        if errors:
            logger.error(f"Rendered {RenderTarget(target).value} document failed checks: {errors}")
            return False, errors

        logger.debug(f"Rendered {RenderTarget(target).value} document passed checks")
        return True, []

    def validate_file(self, file_path: str | Path, target: RenderTarget) -> tuple[bool, list[str]]:
        """
        Validate a rendered document on disk.

        Args:
            file_path: Path to the YAML file
            target: Target the document was rendered for

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        try:
            content = Path(file_path).read_text()
        except OSError as e:
            return False, [f"Cannot read {file_path}: {e}"]

        is_valid, errors = self.validate_yaml(content, target)
        return is_valid, [f"{file_path}: {error}" for error in errors]

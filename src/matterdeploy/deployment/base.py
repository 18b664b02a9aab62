"""Shared renderer machinery.

Renderers turn a ValidatedDescriptor into one document using Jinja2 templates.
Rendering is pure: no files are read or written beyond the packaged templates.
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..shared.schemas import DatabaseConfig, DeploymentDescriptor, RenderTarget, ServiceConfig, ServiceRole
from .errors import ContractViolation
from .validator import DATABASE_REF_PATTERN, ValidatedDescriptor

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Compose service names and Kubernetes service names for application roles
SERVICE_NAMES = {
    ServiceRole.BACKEND: "matter-backend",
    ServiceRole.FRONTEND: "matter-frontend",
}

POSTGRES_DATA_PATH = "/var/lib/postgresql/data"


def yaml_scalar(value: Any) -> str:
    """Dump a single value as an inline YAML scalar, quoting only when needed."""
    # Double quotes keep multi-line strings on one line
    style = '"' if isinstance(value, str) and ("\n" in value or "\r" in value) else None
    dumped = yaml.safe_dump(value, default_flow_style=True, default_style=style, width=float("inf"))
    if dumped.endswith("\n...\n"):
        dumped = dumped[: -len("...\n")]
    return dumped.strip()


def substitute_database_refs(value: str, database: DatabaseConfig) -> str:
    """Replace ${database.host|port|name|user} with the literal database settings."""

    def replace(match: re.Match) -> str:
        return str(getattr(database, match.group(1)))

    return DATABASE_REF_PATTERN.sub(replace, value)


def database_service_name(descriptor: DeploymentDescriptor) -> str:
    """Deterministic name of the database service: first label of database.host."""
    return descriptor.database.host.split(".")[0]


class BaseRenderer:
    """Common interface for document renderers."""

    target: RenderTarget
    template_name: str

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        self.env.filters["yaml_scalar"] = yaml_scalar

    def render(self, validated: ValidatedDescriptor) -> str:
        """
        Render a validated descriptor.

        Args:
            validated: Descriptor returned by DescriptorValidator.validate()

        Returns:
            The complete document text

        Raises:
            ContractViolation: If `validated` did not come from the validator
                or was validated for a different target
        """
        self._check_contract(validated)
        descriptor = validated.descriptor

        context = self._prepare_template_context(descriptor)
        rendered = self.env.get_template(self.template_name).render(**context)

        logger.info(
            f"Rendered {self.target.value} document for namespace '{descriptor.namespace}' "
            f"({len(descriptor.services)} services)"
        )
        return rendered

    def _check_contract(self, validated: Any):
        if not isinstance(validated, ValidatedDescriptor):
            raise ContractViolation(
                f"{type(self).__name__} requires a ValidatedDescriptor, got "
                f"{type(validated).__name__}; run DescriptorValidator.validate() first"
            )
        if not validated.covers(self.target):
            raise ContractViolation(
                f"Descriptor was validated for {sorted(t.value for t in validated.targets)}, "
                f"not for '{self.target.value}'"
            )

    def _prepare_template_context(self, descriptor: DeploymentDescriptor) -> dict[str, Any]:
        raise NotImplementedError

    def _service_name(self, service: ServiceConfig, descriptor: DeploymentDescriptor) -> str:
        if service.role == ServiceRole.DATABASE:
            return database_service_name(descriptor)
        return SERVICE_NAMES[service.role]

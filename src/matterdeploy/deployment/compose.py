"""Docker Compose renderer."""

import logging
from typing import Any

from ..shared.schemas import DeploymentDescriptor, RenderTarget, ServiceConfig, ServiceRole
from ..shared.utils import cpu_to_cores
from .base import POSTGRES_DATA_PATH, BaseRenderer, database_service_name, substitute_database_refs
from .validator import ValidatedDescriptor

logger = logging.getLogger(__name__)

NETWORK_NAME = "matter-network"
POSTGRES_VOLUME = "postgres-data"


def escape_interpolation(value: str) -> str:
    """Keep Compose from expanding $VAR inside a literal value."""
    return value.replace("$", "$$")


class ComposeRenderer(BaseRenderer):
    """Render a validated descriptor as a docker-compose.yml document."""

    target = RenderTarget.COMPOSE
    template_name = "docker-compose.yml.j2"

    def _prepare_template_context(self, descriptor: DeploymentDescriptor) -> dict[str, Any]:
        has_database = descriptor.service_for(ServiceRole.DATABASE) is not None

        services = [self._service_context(service, descriptor, has_database) for service in descriptor.services]

        return {
            "namespace": descriptor.namespace,
            "services": services,
            "network": NETWORK_NAME,
            "volumes": [POSTGRES_VOLUME] if has_database else [],
        }

    def _service_context(
        self,
        service: ServiceConfig,
        descriptor: DeploymentDescriptor,
        has_database: bool,
    ) -> dict[str, Any]:
        database = descriptor.database
        environment: list[tuple[str, str]] = []
        volumes: list[str] = []
        depends_on: list[str] = []

        if service.role == ServiceRole.DATABASE:
            environment += [
                ("POSTGRES_DB", escape_interpolation(database.name)),
                ("POSTGRES_USER", escape_interpolation(database.user)),
                ("POSTGRES_PASSWORD", database.password.render_placeholder()),
            ]
            volumes.append(f"{POSTGRES_VOLUME}:{POSTGRES_DATA_PATH}")
        elif service.role == ServiceRole.BACKEND:
            environment.append(("EMAIL_DOMAIN", escape_interpolation(descriptor.email_domain)))
            if has_database:
                depends_on.append(database_service_name(descriptor))
        elif service.role == ServiceRole.FRONTEND:
            backend = descriptor.service_for(ServiceRole.BACKEND)
            if backend is not None:
                depends_on.append(self._service_name(backend, descriptor))

        overridden = {var.name for var in service.env}
        environment = [(name, value) for name, value in environment if name not in overridden]
        for var in service.env:
            if var.secret_ref is not None:
                environment.append((var.name, var.secret_ref.render_placeholder()))
            else:
                literal = substitute_database_refs(var.value, database)
                environment.append((var.name, escape_interpolation(literal)))

        return {
            "name": self._service_name(service, descriptor),
            "image": service.image,
            "ports": [f"{mapping.published_port}:{mapping.container_port}" for mapping in service.ports],
            "environment": environment,
            "volumes": volumes,
            "depends_on": depends_on,
            "resources": self._resources_context(service),
        }

    def _resources_context(self, service: ServiceConfig) -> dict[str, dict[str, str]]:
        """Requests become reservations and limits become limits."""
        resources = service.resources
        if resources is None:
            return {}

        sections = {}
        for section, cpu, memory in (
            ("limits", resources.cpu_limit, resources.memory_limit),
            ("reservations", resources.cpu_request, resources.memory_request),
        ):
            values = {}
            if cpu is not None:
                values["cpus"] = cpu_to_cores(cpu)
            if memory is not None:
                values["memory"] = memory
            if values:
                sections[section] = values
        return sections


_default_renderer: ComposeRenderer | None = None


def render_compose(validated: ValidatedDescriptor) -> str:
    """Render a validated descriptor as a Docker Compose document."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = ComposeRenderer()
    return _default_renderer.render(validated)

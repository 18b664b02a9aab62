"""Helm values renderer.

Produces a values.yaml for the Matter AI enterprise chart. The frontend
component carries two embedded assets, an Nginx server block and a
runtime-config script, rendered from their own templates and emitted as
literal block strings.
"""

import logging
from typing import Any

from ..shared.schemas import (
    DeploymentDescriptor,
    PortMapping,
    RenderTarget,
    SecretRef,
    ServiceConfig,
    ServiceRole,
)
from ..shared.utils import split_image
from .base import POSTGRES_DATA_PATH, BaseRenderer, substitute_database_refs
from .validator import ValidatedDescriptor

logger = logging.getLogger(__name__)

COMPONENT_KEYS = {
    ServiceRole.BACKEND: "matterBackend",
    ServiceRole.FRONTEND: "matterFrontend",
    ServiceRole.DATABASE: "postgres",
}

# Ingress paths per role; the database is never exposed
INGRESS_PATHS = {
    ServiceRole.BACKEND: "/api",
    ServiceRole.FRONTEND: "/",
}


def _secret_key_ref(ref: SecretRef) -> dict[str, str]:
    return {"name": ref.name, "key": ref.key}


class HelmValuesRenderer(BaseRenderer):
    """Render a validated descriptor as a Helm values.yaml document."""

    target = RenderTarget.HELM
    template_name = "values.yaml.j2"

    def _prepare_template_context(self, descriptor: DeploymentDescriptor) -> dict[str, Any]:
        database = descriptor.database
        has_database = descriptor.service_for(ServiceRole.DATABASE) is not None
        persistence = descriptor.persistence

        components = [self._component_context(service, descriptor) for service in descriptor.services]

        postgres_persistence: dict[str, Any] = {"enabled": has_database}
        if has_database:
            postgres_persistence.update(
                {
                    "size": persistence.size,
                    "accessMode": persistence.access_mode,
                    "storageClass": descriptor.storage_class,
                    "mountPath": POSTGRES_DATA_PATH,
                }
            )

        return {
            "global_values": {
                "namespace": descriptor.namespace,
                "storageClass": descriptor.storage_class or "",
                "emailDomain": descriptor.email_domain,
            },
            "image_credentials": self._image_credentials_context(descriptor),
            "components": components,
            "postgres_persistence": postgres_persistence,
            "postgres_secrets": {
                "existingSecret": database.password.name,
                "passwordKey": database.password.key,
                "host": database.host,
                "port": database.port,
                "database": database.name,
                "username": database.user,
            },
        }

    def _image_credentials_context(self, descriptor: DeploymentDescriptor) -> dict[str, Any] | None:
        credentials = descriptor.registry_credentials
        if credentials is None:
            return None

        # Exactly one credential form is present after validation
        if credentials.auth_token is not None:
            return {
                "registry": credentials.registry,
                "authToken": _secret_key_ref(credentials.auth_token),
            }
        return {
            "registry": credentials.registry,
            "username": credentials.username,
            "password": _secret_key_ref(credentials.password),
        }

    def _component_context(self, service: ServiceConfig, descriptor: DeploymentDescriptor) -> dict[str, Any]:
        repository, tag = split_image(service.image)

        env = []
        for var in service.env:
            if var.secret_ref is not None:
                env.append({"name": var.name, "secretKeyRef": _secret_key_ref(var.secret_ref)})
            else:
                env.append({"name": var.name, "value": substitute_database_refs(var.value, descriptor.database)})

        if service.role == ServiceRole.BACKEND and not any(var.name == "EMAIL_DOMAIN" for var in service.env):
            env.insert(0, {"name": "EMAIL_DOMAIN", "value": descriptor.email_domain})

        component = {
            "key": COMPONENT_KEYS[service.role],
            "name": self._service_name(service, descriptor),
            "image": {"repository": repository, "tag": tag},
            "replicas": service.replicas,
            "resources": self._resources_context(service),
            "env": env,
            "service": self._service_port_context(service.ports),
            "ingress": self._ingress_context(service, descriptor),
            "config": None,
        }

        if service.role == ServiceRole.FRONTEND:
            component["config"] = self._frontend_assets(service, descriptor)
        return component

    def _resources_context(self, service: ServiceConfig) -> dict[str, dict[str, str]]:
        resources = service.resources
        if resources is None:
            return {}

        sections = {}
        for section, cpu, memory in (
            ("requests", resources.cpu_request, resources.memory_request),
            ("limits", resources.cpu_limit, resources.memory_limit),
        ):
            values = {}
            if cpu is not None:
                values["cpu"] = cpu
            if memory is not None:
                values["memory"] = memory
            if values:
                sections[section] = values
        return sections

    def _service_port_context(self, ports: list[PortMapping]) -> dict[str, Any] | None:
        """The first mapping is the primary port; the rest become extraPorts."""
        if not ports:
            return None

        primary, *extra = ports
        return {
            "port": primary.cluster_port,
            "targetPort": primary.container_port,
            "extraPorts": [
                {
                    "name": f"port-{mapping.container_port}",
                    "port": mapping.cluster_port,
                    "targetPort": mapping.container_port,
                }
                for mapping in extra
            ],
        }

    def _ingress_context(self, service: ServiceConfig, descriptor: DeploymentDescriptor) -> dict[str, Any]:
        ingress = descriptor.ingress
        if ingress is None or not ingress.enabled or service.role not in INGRESS_PATHS:
            return {"enabled": False}

        return {
            "enabled": True,
            "className": ingress.class_name,
            "host": ingress.host,
            "path": INGRESS_PATHS[service.role],
            "tlsSecretName": ingress.tls_secret_name,
        }

    def _frontend_assets(self, frontend: ServiceConfig, descriptor: DeploymentDescriptor) -> dict[str, str]:
        """Render the embedded Nginx config and runtime-config script."""
        ingress = descriptor.ingress
        ingress_enabled = ingress is not None and ingress.enabled

        backend = descriptor.service_for(ServiceRole.BACKEND)
        backend_port = backend.ports[0].cluster_port if backend.ports else 8080

        listen_port = frontend.ports[0].container_port if frontend.ports else 80

        asset_context = {
            "namespace": descriptor.namespace,
            "email_domain": descriptor.email_domain,
            "server_name": ingress.host if ingress_enabled else "_",
            "listen_port": listen_port,
            "backend_host": self._service_name(backend, descriptor),
            "backend_port": backend_port,
            "api_base_url": f"https://{ingress.host}/api" if ingress_enabled else "/api",
        }

        nginx_conf = self.env.get_template("nginx.conf.j2").render(**asset_context)
        runtime_config = self.env.get_template("runtime-config.js.j2").render(**asset_context)

        logger.debug(f"Rendered frontend assets for namespace '{descriptor.namespace}'")
        return {
            "nginxConf": nginx_conf.rstrip("\n"),
            "runtimeConfig": runtime_config.rstrip("\n"),
        }


_default_renderer: HelmValuesRenderer | None = None


def render_helm_values(validated: ValidatedDescriptor) -> str:
    """Render a validated descriptor as a Helm values document."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = HelmValuesRenderer()
    return _default_renderer.render(validated)

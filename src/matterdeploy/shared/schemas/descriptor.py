"""Deployment descriptor schemas.

A descriptor is the in-memory description of one Matter AI deployment. Fields the
validator treats as required are still optional here so that an incomplete
descriptor can be built from a form or file and have every problem reported at once.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ServiceRole(str, Enum):
    """Functional category of a service within a deployment."""

    BACKEND = "backend"
    FRONTEND = "frontend"
    DATABASE = "database"


class RenderTarget(str, Enum):
    """Supported output document formats."""

    COMPOSE = "compose"
    HELM = "helm"


class DescriptorModel(BaseModel):
    """Base model: snake_case attributes, camelCase aliases on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class SecretRef(DescriptorModel):
    """Reference to a secret held by an external secret store."""

    name: str = Field(..., description="Kubernetes secret name (e.g. postgres-password)")
    key: str = Field("password", description="Key inside the secret")
    placeholder: str | None = Field(
        None, description="Literal placeholder emitted where no secret store is available"
    )

    def render_placeholder(self) -> str:
        """Placeholder text for targets that cannot reference a secret store."""
        if self.placeholder:
            return self.placeholder
        return "${" + re.sub(r"[^A-Za-z0-9]", "_", self.name).upper() + "}"


class DatabaseConfig(DescriptorModel):
    """Postgres connection settings shared by the backend and the database service."""

    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: SecretRef | str | None = Field(
        None, description="Secret reference; literal passwords are rejected by the validator"
    )


class ResourceLimits(DescriptorModel):
    """Kubernetes-style resource quantities for one service."""

    cpu_request: str | None = None
    cpu_limit: str | None = None
    memory_request: str | None = None
    memory_limit: str | None = None

    @field_validator("cpu_request", "cpu_limit", "memory_request", "memory_limit", mode="before")
    @classmethod
    def coerce_number(cls, v):
        # YAML reads `cpuRequest: 0.25` as a float
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class PortMapping(DescriptorModel):
    """Container port and where it is published."""

    container_port: int | None = None
    host_port: int | None = Field(None, description="Published port (Compose)")
    service_port: int | None = Field(None, description="Service port (Kubernetes)")

    @property
    def published_port(self) -> int | None:
        return self.host_port or self.service_port or self.container_port

    @property
    def cluster_port(self) -> int | None:
        return self.service_port or self.host_port or self.container_port


class EnvVar(DescriptorModel):
    """Environment variable carrying either a literal value or a secret reference."""

    name: str | None = None
    value: str | None = None
    secret_ref: SecretRef | None = None

    @field_validator("value", mode="before")
    @classmethod
    def coerce_scalar(cls, v):
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v


class ServiceConfig(DescriptorModel):
    """One container in the deployment."""

    role: ServiceRole | None = None
    image: str | None = None
    replicas: int = Field(1, description="Replica count (Kubernetes target only)")
    resources: ResourceLimits | None = None
    ports: list[PortMapping] = Field(default_factory=list)
    env: list[EnvVar] = Field(default_factory=list)

    @field_validator("env", mode="before")
    @classmethod
    def env_from_mapping(cls, v):
        """Accept `{NAME: value}` and `{NAME: {secretRef: ...}}` as well as a list."""
        if isinstance(v, dict):
            env = []
            for name, value in v.items():
                if isinstance(value, dict):
                    env.append({"name": name, **value})
                else:
                    env.append({"name": name, "value": value})
            return env
        return v


class IngressConfig(DescriptorModel):
    """Public HTTPS entry point for the frontend and backend."""

    enabled: bool = False
    host: str | None = None
    tls_secret_name: str | None = None
    class_name: str = "nginx"


class RegistryCredentials(DescriptorModel):
    """Private registry login; either username/password or an auth token."""

    registry: str | None = None
    username: str | None = None
    password: SecretRef | None = None
    auth_token: SecretRef | None = None


class PersistenceConfig(DescriptorModel):
    """Postgres volume sizing. Capacity is always supplied by the operator."""

    size: str | None = None
    access_mode: str = "ReadWriteOnce"


class DeploymentDescriptor(DescriptorModel):
    """Desired state of one deployment target."""

    namespace: str | None = None
    email_domain: str | None = None
    storage_class: str | None = None
    database: DatabaseConfig | None = None
    services: list[ServiceConfig] = Field(default_factory=list)
    ingress: IngressConfig | None = None
    registry_credentials: RegistryCredentials | None = None
    persistence: PersistenceConfig | None = None

    def service_for(self, role: ServiceRole) -> ServiceConfig | None:
        """First service with the given role, if any."""
        return next((s for s in self.services if s.role == role), None)

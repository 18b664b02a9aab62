"""Descriptor validation.

Checks a DeploymentDescriptor for completeness and cross-field consistency
before any document is rendered. Every problem is collected; validation never
stops at the first failure.
"""

import logging
import re

from ..shared.schemas import (
    DeploymentDescriptor,
    RenderTarget,
    SecretRef,
    ServiceConfig,
    ServiceRole,
    ValidationError,
    ValidationErrorKind,
)
from ..shared.utils import parse_cpu, parse_kubernetes_memory, parse_memory, split_image
from ..shared.utils.image import REPOSITORY_PATTERN, TAG_PATTERN
from .errors import ContractViolation, DescriptorValidationFailed

logger = logging.getLogger(__name__)

DNS_LABEL_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
DNS_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
HOSTNAME_PATTERN = re.compile(
    r"^[A-Za-z0-9]([-A-Za-z0-9]*[A-Za-z0-9])?(\.[A-Za-z0-9]([-A-Za-z0-9]*[A-Za-z0-9])?)*$"
)
ENV_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
SECRET_KEY_PATTERN = re.compile(r"^[-._a-zA-Z0-9]+$")
DATABASE_REF_PATTERN = re.compile(r"\$\{database\.([^}]*)\}")

# Database fields an env value may reference; the password never is
DATABASE_REF_FIELDS = ("host", "port", "name", "user")

# Roles every render target needs
REQUIRED_ROLES = (ServiceRole.BACKEND, ServiceRole.FRONTEND)

MISSING = ValidationErrorKind.MISSING_FIELD
INVALID = ValidationErrorKind.INVALID_FORMAT
RANGE = ValidationErrorKind.RANGE_VIOLATION
EXCLUSIVE = ValidationErrorKind.MUTUAL_EXCLUSION_VIOLATION
DUPLICATE = ValidationErrorKind.DUPLICATE_VALUE

_VALIDATION_TOKEN = object()


class ValidatedDescriptor:
    """A descriptor the validator accepted, frozen for rendering.

    Only DescriptorValidator can create one. It holds a private deep copy so
    later changes to the caller's descriptor never reach a renderer.
    """

    __slots__ = ("_descriptor", "_targets")

    def __init__(self, descriptor: DeploymentDescriptor, targets: frozenset, _token=None):
        if _token is not _VALIDATION_TOKEN:
            raise ContractViolation(
                "ValidatedDescriptor can only be created by DescriptorValidator.validate()"
            )
        object.__setattr__(self, "_descriptor", descriptor.model_copy(deep=True))
        object.__setattr__(self, "_targets", targets)

    def __setattr__(self, name, value):
        raise AttributeError("ValidatedDescriptor is immutable")

    @property
    def descriptor(self) -> DeploymentDescriptor:
        """A fresh copy of the validated descriptor."""
        return self._descriptor.model_copy(deep=True)

    @property
    def targets(self) -> frozenset:
        return self._targets

    def covers(self, target: RenderTarget) -> bool:
        """Whether the descriptor was validated against the rules of `target`."""
        return target in self._targets


class ValidationResult:
    """Outcome of a validation run: either a ValidatedDescriptor or every error."""

    def __init__(self, validated: ValidatedDescriptor | None, errors: list[ValidationError]):
        self.validated = validated
        self.errors = errors

    @property
    def is_valid(self) -> bool:
        return self.validated is not None

    def raise_for_errors(self) -> ValidatedDescriptor:
        """Return the validated descriptor or raise DescriptorValidationFailed."""
        if self.validated is None:
            raise DescriptorValidationFailed(self.errors)
        return self.validated

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, errors={len(self.errors)})"


class DescriptorValidator:
    """Validate deployment descriptors."""

    def validate(
        self,
        descriptor: DeploymentDescriptor,
        target: RenderTarget | None = None,
    ) -> ValidationResult:
        """
        Validate a descriptor against one render target or all of them.

        Args:
            descriptor: Raw, possibly incomplete descriptor
            target: Render target whose rules apply; None applies every target's rules

        Returns:
            ValidationResult holding a ValidatedDescriptor on success, or the
            complete list of errors on failure
        """
        if not isinstance(descriptor, DeploymentDescriptor):
            raise ContractViolation(
                f"Expected a DeploymentDescriptor, got {type(descriptor).__name__}"
            )

        targets = frozenset(RenderTarget) if target is None else frozenset({RenderTarget(target)})
        errors: list[ValidationError] = []

        self._check_identity(descriptor, errors)
        self._check_database(descriptor, targets, errors)
        self._check_services(descriptor, targets, errors)
        self._check_ingress(descriptor, errors)

        if RenderTarget.HELM in targets:
            self._check_registry_credentials(descriptor, errors)
            self._check_persistence(descriptor, errors)

        if descriptor.storage_class is not None:
            self._check_dns_name(descriptor.storage_class, "storageClass", errors, subdomain=True)

        if errors:
            logger.info(f"Descriptor validation failed with {len(errors)} error(s)")
            for error in errors:
                logger.debug(f"Validation error: {error}")
            return ValidationResult(None, errors)

        logger.debug(
            f"Descriptor for namespace '{descriptor.namespace}' valid for "
            f"{sorted(t.value for t in targets)}"
        )
        return ValidationResult(ValidatedDescriptor(descriptor, targets, _token=_VALIDATION_TOKEN), [])

    def _error(self, errors: list, path: str, kind: ValidationErrorKind, message: str):
        errors.append(ValidationError(field_path=path, kind=kind, message=message))

    def _check_dns_name(self, value: str, path: str, errors: list, subdomain: bool = False):
        pattern = DNS_SUBDOMAIN_PATTERN if subdomain else DNS_LABEL_PATTERN
        limit = 253 if subdomain else 63
        if not pattern.match(value) or len(value) > limit:
            kind = "DNS subdomain" if subdomain else "DNS label"
            self._error(
                errors, path, INVALID,
                f"'{value}' is not a valid {kind} (lowercase alphanumerics, '-'"
                f"{', and .' if subdomain else ''}; at most {limit} characters)",
            )

    def _check_hostname(self, value: str, path: str, errors: list) -> bool:
        if len(value) > 253 or not HOSTNAME_PATTERN.match(value) or any(
            len(label) > 63 for label in value.split(".")
        ):
            self._error(errors, path, INVALID, f"'{value}' is not a valid hostname")
            return False
        return True

    def _check_port(self, value: int | None, path: str, errors: list, required: bool = False):
        if value is None:
            if required:
                self._error(errors, path, MISSING, "Port is required")
            return
        if not 1 <= value <= 65535:
            self._error(errors, path, RANGE, f"Port {value} is outside 1-65535")

    def _check_secret_ref(self, ref: SecretRef, path: str, errors: list):
        if not ref.name:
            self._error(errors, f"{path}.name", MISSING, "Secret name is required")
        else:
            self._check_dns_name(ref.name, f"{path}.name", errors, subdomain=True)
        if not ref.key:
            self._error(errors, f"{path}.key", MISSING, "Secret key is required")
        elif not SECRET_KEY_PATTERN.match(ref.key):
            self._error(errors, f"{path}.key", INVALID, f"'{ref.key}' is not a valid secret key")

    def _check_identity(self, descriptor: DeploymentDescriptor, errors: list):
        if not descriptor.namespace:
            self._error(errors, "namespace", MISSING, "Namespace is required")
        else:
            self._check_dns_name(descriptor.namespace, "namespace", errors)

        if not descriptor.email_domain:
            self._error(errors, "emailDomain", MISSING, "Email domain is required")
        elif "." not in descriptor.email_domain:
            self._error(
                errors, "emailDomain", INVALID,
                f"'{descriptor.email_domain}' must contain at least one '.'",
            )
        else:
            self._check_hostname(descriptor.email_domain, "emailDomain", errors)

    def _check_database(self, descriptor: DeploymentDescriptor, targets: frozenset, errors: list):
        database = descriptor.database
        if database is None:
            self._error(errors, "database", MISSING, "Database configuration is required")
            return

        if not database.host:
            self._error(errors, "database.host", MISSING, "Database host is required")
        elif self._check_hostname(database.host, "database.host", errors):
            # Compose names the database service after the host's first label
            first_label = database.host.split(".")[0]
            if RenderTarget.COMPOSE in targets and (
                not DNS_LABEL_PATTERN.match(first_label) or first_label.isdigit()
            ):
                self._error(
                    errors, "database.host", INVALID,
                    f"'{database.host}' must start with a lowercase, non-numeric DNS label "
                    "to name the Compose database service",
                )

        self._check_port(database.port, "database.port", errors, required=True)

        for field, path in (("name", "database.name"), ("user", "database.user")):
            if not getattr(database, field):
                self._error(errors, path, MISSING, f"Database {field} is required")

        if database.password is None or database.password == "":
            self._error(errors, "database.password", MISSING, "Database password reference is required")
        elif isinstance(database.password, str):
            self._error(
                errors, "database.password", INVALID,
                "Database password must be a secret reference, not a literal value",
            )
        else:
            self._check_secret_ref(database.password, "database.password", errors)

    def _check_services(self, descriptor: DeploymentDescriptor, targets: frozenset, errors: list):
        seen_roles: dict[ServiceRole, int] = {}

        for index, service in enumerate(descriptor.services):
            path = f"services[{index}]"

            if service.role is None:
                self._error(errors, f"{path}.role", MISSING, "Service role is required")
            elif service.role in seen_roles:
                self._error(
                    errors, f"{path}.role", DUPLICATE,
                    f"Role '{service.role.value}' is already used by services[{seen_roles[service.role]}]",
                )
            else:
                seen_roles[service.role] = index

            self._check_service(service, path, targets, errors)

        for role in REQUIRED_ROLES:
            if role not in seen_roles:
                self._error(
                    errors, "services", MISSING,
                    f"A service with role '{role.value}' is required",
                )

        if RenderTarget.COMPOSE in targets:
            self._check_host_ports(descriptor, errors)

    def _check_service(
        self,
        service: ServiceConfig,
        path: str,
        targets: frozenset,
        errors: list,
    ):
        self._check_image(service.image, f"{path}.image", errors)

        if service.replicas < 1:
            self._error(errors, f"{path}.replicas", RANGE, f"Replicas must be at least 1, got {service.replicas}")

        if service.resources is not None:
            self._check_resources(service, path, targets, errors)

        seen_ports: dict[int, int] = {}
        for port_index, mapping in enumerate(service.ports):
            port_path = f"{path}.ports[{port_index}]"
            self._check_port(mapping.container_port, f"{port_path}.containerPort", errors, required=True)
            self._check_port(mapping.host_port, f"{port_path}.hostPort", errors)
            self._check_port(mapping.service_port, f"{port_path}.servicePort", errors)

            if mapping.container_port is None:
                continue
            if mapping.container_port in seen_ports:
                self._error(
                    errors, f"{port_path}.containerPort", DUPLICATE,
                    f"Container port {mapping.container_port} is already mapped by "
                    f"{path}.ports[{seen_ports[mapping.container_port]}]",
                )
            else:
                seen_ports[mapping.container_port] = port_index

        self._check_env(service, path, errors)

    def _check_image(self, image: str | None, path: str, errors: list):
        if not image:
            self._error(errors, path, MISSING, "Image is required")
            return
        if "@" in image:
            self._error(errors, path, INVALID, f"'{image}' uses a digest; use repository:tag")
            return

        repository, tag = split_image(image)
        if not tag:
            self._error(errors, path, INVALID, f"'{image}' must be repository:tag with a non-empty tag")
            return
        if not REPOSITORY_PATTERN.match(repository):
            self._error(errors, path, INVALID, f"'{repository}' is not a valid image repository")
        if not TAG_PATTERN.match(tag):
            self._error(errors, path, INVALID, f"'{tag}' is not a valid image tag")

    def _check_resources(self, service: ServiceConfig, path: str, targets: frozenset, errors: list):
        resources = service.resources
        checks = [("cpu", "CPU", parse_cpu, resources.cpu_request, resources.cpu_limit)]
        # Docker reads "600m" as megabytes, Kubernetes as millibytes
        if RenderTarget.COMPOSE in targets:
            checks.append(
                ("memory", "Docker memory", parse_memory, resources.memory_request, resources.memory_limit)
            )
        if RenderTarget.HELM in targets:
            checks.append(
                ("memory", "Kubernetes memory", parse_kubernetes_memory,
                 resources.memory_request, resources.memory_limit)
            )

        found: list[ValidationError] = []
        for kind, label, parse, request, limit in checks:
            request_path = f"{path}.resources.{kind}Request"
            limit_path = f"{path}.resources.{kind}Limit"

            parsed = {}
            for side, value, field_path in (("request", request, request_path), ("limit", limit, limit_path)):
                if value is None:
                    continue
                amount = parse(value)
                if amount is None:
                    self._error(found, field_path, INVALID, f"'{value}' is not a valid {label} quantity")
                else:
                    parsed[side] = amount

            # Comparable only when both sides parsed
            if "request" in parsed and "limit" in parsed and parsed["request"] > parsed["limit"]:
                self._error(
                    found, request_path, RANGE,
                    f"{label} request '{request}' exceeds {kind} limit '{limit}'",
                )

        # One report per field path and kind, even when both targets object
        reported = set()
        for error in found:
            if (error.field_path, error.kind) not in reported:
                reported.add((error.field_path, error.kind))
                errors.append(error)

    def _check_env(self, service: ServiceConfig, path: str, errors: list):
        seen_names: dict[str, int] = {}

        for env_index, var in enumerate(service.env):
            env_path = f"{path}.env[{env_index}]"

            if not var.name:
                self._error(errors, f"{env_path}.name", MISSING, "Environment variable name is required")
            elif not ENV_NAME_PATTERN.match(var.name):
                self._error(errors, f"{env_path}.name", INVALID, f"'{var.name}' is not a valid variable name")
            elif var.name in seen_names:
                self._error(
                    errors, f"{env_path}.name", DUPLICATE,
                    f"Variable '{var.name}' is already defined by {path}.env[{seen_names[var.name]}]",
                )
            else:
                seen_names[var.name] = env_index

            if var.value is not None and var.secret_ref is not None:
                self._error(errors, env_path, EXCLUSIVE, "Set either value or secretRef, not both")
            elif var.value is None and var.secret_ref is None:
                self._error(errors, f"{env_path}.value", MISSING, "A value or secretRef is required")
            elif var.secret_ref is not None:
                self._check_secret_ref(var.secret_ref, f"{env_path}.secretRef", errors)
            else:
                for field in DATABASE_REF_PATTERN.findall(var.value):
                    if field not in DATABASE_REF_FIELDS:
                        self._error(
                            errors, f"{env_path}.value", INVALID,
                            f"'${{database.{field}}}' is not a substitutable database field "
                            f"(allowed: {', '.join(DATABASE_REF_FIELDS)})",
                        )

    def _check_host_ports(self, descriptor: DeploymentDescriptor, errors: list):
        published: dict[int, str] = {}

        for index, service in enumerate(descriptor.services):
            for port_index, mapping in enumerate(service.ports):
                port = mapping.published_port
                if port is None:
                    continue
                port_path = f"services[{index}].ports[{port_index}]"
                if mapping.host_port is not None:
                    field = "hostPort"
                elif mapping.service_port is not None:
                    field = "servicePort"
                else:
                    field = "containerPort"
                if port in published:
                    self._error(
                        errors, f"{port_path}.{field}", DUPLICATE,
                        f"Host port {port} is already published by {published[port]}",
                    )
                else:
                    published[port] = port_path

    def _check_ingress(self, descriptor: DeploymentDescriptor, errors: list):
        ingress = descriptor.ingress
        if ingress is None or not ingress.enabled:
            return

        if not ingress.host:
            self._error(errors, "ingress.host", MISSING, "Ingress host is required when ingress is enabled")
        else:
            self._check_hostname(ingress.host, "ingress.host", errors)

        if not ingress.tls_secret_name:
            self._error(
                errors, "ingress.tlsSecretName", MISSING,
                "TLS secret name is required when ingress is enabled",
            )
        else:
            self._check_dns_name(ingress.tls_secret_name, "ingress.tlsSecretName", errors, subdomain=True)

    def _check_registry_credentials(self, descriptor: DeploymentDescriptor, errors: list):
        credentials = descriptor.registry_credentials
        if credentials is None:
            return

        if not credentials.registry:
            self._error(errors, "registryCredentials.registry", MISSING, "Registry URL is required")
        elif any(c.isspace() for c in credentials.registry):
            self._error(errors, "registryCredentials.registry", INVALID, "Registry URL must not contain whitespace")

        has_basic = credentials.username is not None or credentials.password is not None
        has_token = credentials.auth_token is not None

        if has_basic and has_token:
            self._error(
                errors, "registryCredentials", EXCLUSIVE,
                "Use either username/password or authToken, not both",
            )
        elif not has_basic and not has_token:
            self._error(
                errors, "registryCredentials", MISSING,
                "Either username/password or authToken is required",
            )
        elif has_basic:
            if not credentials.username:
                self._error(errors, "registryCredentials.username", MISSING, "Registry username is required")
            if credentials.password is None:
                self._error(errors, "registryCredentials.password", MISSING, "Registry password reference is required")
            else:
                self._check_secret_ref(credentials.password, "registryCredentials.password", errors)
        else:
            self._check_secret_ref(credentials.auth_token, "registryCredentials.authToken", errors)

    def _check_persistence(self, descriptor: DeploymentDescriptor, errors: list):
        persistence = descriptor.persistence
        has_database = descriptor.service_for(ServiceRole.DATABASE) is not None

        if persistence is None or not persistence.size:
            if has_database:
                self._error(
                    errors, "persistence.size", MISSING,
                    "Persistent volume size is required for the database service",
                )
            return

        if parse_kubernetes_memory(persistence.size) is None:
            self._error(errors, "persistence.size", INVALID, f"'{persistence.size}' is not a valid storage quantity")


_default_validator = DescriptorValidator()


def validate(descriptor: DeploymentDescriptor, target: RenderTarget | None = None) -> ValidationResult:
    """Validate a descriptor with the shared DescriptorValidator."""
    return _default_validator.validate(descriptor, target)

"""Pure utility functions for the matterdeploy UI.

No Streamlit dependency, so tests can import it directly.
"""

ROLES = ("backend", "frontend", "database")

# Form defaults per role, matching the documented Matter AI images
ROLE_DEFAULTS = {
    "backend": {
        "image": "gravitycloud/matter-enterprise:latest",
        "container_port": 8080,
        "host_port": 8080,
    },
    "frontend": {
        "image": "gravitycloud/matter-enterprise-frontend:latest",
        "container_port": 3000,
        "host_port": 80,
    },
    "database": {
        "image": "postgres:16",
        "container_port": 5432,
        "host_port": 5432,
    },
}

SECRET_PREFIX = "secret:"


def parse_env_lines(text: str) -> list[dict]:
    """Parse KEY=VALUE lines into descriptor env entries.

    A value written as ``secret:NAME`` or ``secret:NAME/KEY`` becomes a secret
    reference. Blank lines and lines starting with ``#`` are skipped; duplicate
    names are kept so the backend can report them.

    Examples:
        "LOG_LEVEL=info" → [{"name": "LOG_LEVEL", "value": "info"}]
        "OPENAI_API_KEY=secret:openai/api-key"
            → [{"name": "OPENAI_API_KEY", "secretRef": {"name": "openai", "key": "api-key"}}]
    """
    env = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        name, _, value = line.partition("=")
        name = name.strip()
        value = value.strip()

        if value.startswith(SECRET_PREFIX):
            secret_name, _, key = value[len(SECRET_PREFIX):].partition("/")
            ref = {"name": secret_name}
            if key:
                ref["key"] = key
            env.append({"name": name, "secretRef": ref})
        else:
            env.append({"name": name, "value": value})
    return env


def _resources(form: dict) -> dict | None:
    fields = {
        "cpuRequest": form.get("cpu_request"),
        "cpuLimit": form.get("cpu_limit"),
        "memoryRequest": form.get("memory_request"),
        "memoryLimit": form.get("memory_limit"),
    }
    resources = {key: value.strip() for key, value in fields.items() if value and value.strip()}
    return resources or None


def build_service(role: str, form: dict) -> dict:
    """Build one descriptor service entry from a role's form values."""
    service = {
        "role": role,
        "image": form.get("image", "").strip(),
        "replicas": form.get("replicas", 1),
    }

    resources = _resources(form)
    if resources:
        service["resources"] = resources

    if form.get("container_port"):
        port = {"containerPort": form["container_port"]}
        if form.get("host_port"):
            port["hostPort"] = form["host_port"]
        service["ports"] = [port]

    env = parse_env_lines(form.get("env", ""))
    if env:
        service["env"] = env
    return service


def build_descriptor(form: dict) -> dict:
    """Build a descriptor document from the UI form state.

    Empty optional blocks are left out rather than sent half-filled, so the
    backend reports only what the operator actually has to fix.
    """
    descriptor = {
        "namespace": form.get("namespace", "").strip(),
        "emailDomain": form.get("email_domain", "").strip(),
        "database": {
            "host": form.get("db_host", "").strip(),
            "port": form.get("db_port"),
            "name": form.get("db_name", "").strip(),
            "user": form.get("db_user", "").strip(),
            "password": {
                "name": form.get("db_password_secret", "").strip(),
                "key": form.get("db_password_key", "password").strip() or "password",
            },
        },
        "services": [
            build_service(role, form["services"][role])
            for role in ROLES
            if form.get("services", {}).get(role, {}).get("include", True)
        ],
    }

    if form.get("storage_class", "").strip():
        descriptor["storageClass"] = form["storage_class"].strip()

    if form.get("ingress_enabled"):
        descriptor["ingress"] = {
            "enabled": True,
            "host": form.get("ingress_host", "").strip(),
            "tlsSecretName": form.get("ingress_tls_secret", "").strip(),
        }

    if form.get("registry_enabled"):
        credentials = {"registry": form.get("registry", "").strip()}
        if form.get("registry_auth_mode") == "token":
            credentials["authToken"] = {"name": form.get("registry_token_secret", "").strip()}
        else:
            credentials["username"] = form.get("registry_username", "").strip()
            credentials["password"] = {"name": form.get("registry_password_secret", "").strip()}
        descriptor["registryCredentials"] = credentials

    if form.get("persistence_size", "").strip():
        descriptor["persistence"] = {"size": form["persistence_size"].strip()}

    return descriptor

"""Tests for the UI form helpers and backend client."""

import importlib
import sys
from pathlib import Path
from unittest import mock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent / "ui"))

import api_client  # noqa: E402
from helpers import build_descriptor, build_service, parse_env_lines  # noqa: E402

from matterdeploy.deployment import descriptor_from_dict, validate  # noqa: E402


def _form(**overrides) -> dict:
    form = {
        "namespace": "matterai",
        "email_domain": "acme.com",
        "db_host": "postgres",
        "db_port": 5432,
        "db_name": "matter",
        "db_user": "matter",
        "db_password_secret": "postgres-password",
        "db_password_key": "password",
        "persistence_size": "10Gi",
        "services": {
            "backend": {
                "include": True,
                "image": "gravitycloud/matter-enterprise:latest",
                "replicas": 1,
                "container_port": 8080,
                "host_port": 8080,
                "env": "DATABASE_PASSWORD=secret:postgres-password\n",
            },
            "frontend": {
                "include": True,
                "image": "gravitycloud/matter-enterprise-frontend:latest",
                "replicas": 1,
                "container_port": 3000,
                "host_port": 80,
            },
            "database": {
                "include": True,
                "image": "postgres:16",
                "replicas": 1,
                "container_port": 5432,
                "host_port": 5432,
            },
        },
    }
    form.update(overrides)
    return form


def test_parse_env_lines():
    text = """
    # comment
    LOG_LEVEL=info
    OPENAI_API_KEY=secret:openai/api-key
    DATABASE_PASSWORD=secret:postgres-password
    URL=http://x?a=b
    """

    assert parse_env_lines(text) == [
        {"name": "LOG_LEVEL", "value": "info"},
        {"name": "OPENAI_API_KEY", "secretRef": {"name": "openai", "key": "api-key"}},
        {"name": "DATABASE_PASSWORD", "secretRef": {"name": "postgres-password"}},
        {"name": "URL", "value": "http://x?a=b"},
    ]


def test_parse_env_lines_keeps_duplicates():
    assert [var["name"] for var in parse_env_lines("A=1\nA=2")] == ["A", "A"]


def test_build_service_resources():
    service = build_service(
        "backend",
        {"image": " app:1 ", "cpu_request": "250m", "memory_limit": "1Gi", "cpu_limit": " "},
    )

    assert service["image"] == "app:1"
    assert service["resources"] == {"cpuRequest": "250m", "memoryLimit": "1Gi"}
    assert "ports" not in service
    assert "env" not in service


def test_build_descriptor_is_valid():
    descriptor = descriptor_from_dict(build_descriptor(_form()))
    result = validate(descriptor)

    assert result.is_valid, result.errors
    assert [service.role.value for service in descriptor.services] == ["backend", "frontend", "database"]


def test_build_descriptor_excluded_database():
    form = _form(db_host="db.acme.com", persistence_size="")
    form["services"]["database"]["include"] = False

    data = build_descriptor(form)

    assert [service["role"] for service in data["services"]] == ["backend", "frontend"]
    assert "persistence" not in data
    assert validate(descriptor_from_dict(data)).is_valid


def test_build_descriptor_optional_blocks():
    data = build_descriptor(
        _form(
            storage_class="gp3",
            ingress_enabled=True,
            ingress_host="matter.acme.com",
            ingress_tls_secret="matter-tls",
            registry_enabled=True,
            registry="https://registry.acme.com",
            registry_auth_mode="token",
            registry_token_secret="registry-token",
        )
    )

    assert data["storageClass"] == "gp3"
    assert data["ingress"] == {"enabled": True, "host": "matter.acme.com", "tlsSecretName": "matter-tls"}
    assert data["registryCredentials"] == {
        "registry": "https://registry.acme.com",
        "authToken": {"name": "registry-token"},
    }
    assert validate(descriptor_from_dict(data)).is_valid


def test_validate_descriptor_transport_failure():
    with mock.patch.object(api_client.requests, "post", side_effect=requests.ConnectionError("refused")):
        result = api_client.validate_descriptor({"namespace": "matterai"})

    assert result["valid"] is False
    assert "refused" in result["error"]


def test_render_document_success():
    response = mock.Mock(status_code=200, ok=True)
    response.json.return_value = {"filename": "values.yaml", "content": "global: {}\n", "target": "helm"}

    with mock.patch.object(api_client.requests, "post", return_value=response) as post:
        result = api_client.render_document({"namespace": "matterai"}, "helm")

    assert result == {"success": True, "filename": "values.yaml", "content": "global: {}\n"}
    assert post.call_args.args[0].endswith("/api/v1/render/helm")


def test_render_document_validation_errors():
    errors = [{"field_path": "namespace", "kind": "MissingField", "message": "Namespace is required"}]
    response = mock.Mock(status_code=422, ok=False)
    response.json.return_value = {"detail": {"message": "Descriptor has 1 validation error(s)", "errors": errors}}

    with mock.patch.object(api_client.requests, "post", return_value=response):
        result = api_client.render_document({}, "compose")

    assert result == {"success": False, "errors": errors}


def test_render_document_backend_down():
    with mock.patch.object(api_client.requests, "post", side_effect=requests.ConnectionError("refused")):
        result = api_client.render_document({}, "compose")

    assert result["success"] is False
    assert result["error"].startswith("Backend not reachable")


@pytest.mark.integration
def test_render_against_running_backend():
    """Requires the API running at $API_BASE_URL."""
    result = api_client.render_document(build_descriptor(_form()), "compose")

    assert result["success"] is True
    assert result["filename"] == "docker-compose.yml"


def test_importing_api_client_leaves_logging_alone():
    with mock.patch("logging.basicConfig") as basic_config:
        importlib.reload(api_client)

    basic_config.assert_not_called()

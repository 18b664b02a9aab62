"""Tests for the FastAPI endpoints."""

import logging
from unittest import mock

import pytest
import yaml
from fastapi.testclient import TestClient

from matterdeploy.api.app import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "matterdeploy"}


def test_validate_valid_descriptor(client, descriptor_data):
    response = client.post("/api/v1/validate", json={"descriptor": descriptor_data})

    assert response.status_code == 200
    assert response.json() == {"valid": True, "errors": []}


def test_validate_reports_every_error(client, descriptor_data):
    descriptor_data["namespace"] = "Matter_AI"
    descriptor_data["services"][0]["replicas"] = 0

    response = client.post("/api/v1/validate", json={"descriptor": descriptor_data})
    body = response.json()

    assert response.status_code == 200
    assert body["valid"] is False
    paths = {error["field_path"] for error in body["errors"]}
    assert {"namespace", "services[0].replicas"} <= paths


def test_validate_for_one_target(client, descriptor_data):
    del descriptor_data["persistence"]

    compose = client.post("/api/v1/validate", json={"descriptor": descriptor_data, "target": "compose"})
    helm = client.post("/api/v1/validate", json={"descriptor": descriptor_data, "target": "helm"})

    assert compose.json()["valid"] is True
    assert helm.json()["valid"] is False
    assert helm.json()["errors"][0]["field_path"] == "persistence.size"


def test_validate_structural_error(client, descriptor_data):
    descriptor_data["services"][0]["role"] = "cache"

    response = client.post("/api/v1/validate", json={"descriptor": descriptor_data})
    body = response.json()

    assert response.status_code == 200
    assert body["valid"] is False
    assert body["errors"][0]["field_path"] == "services[0].role"
    assert body["errors"][0]["kind"] == "InvalidFormat"


def test_render_compose(client, descriptor_data):
    response = client.post("/api/v1/render/compose", json={"descriptor": descriptor_data})
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["target"] == "compose"
    assert body["filename"] == "docker-compose.yml"
    assert yaml.safe_load(body["content"])["services"]["matter-frontend"]["ports"] == ["80:3000"]


def test_render_helm(client, descriptor_data):
    response = client.post("/api/v1/render/helm", json={"descriptor": descriptor_data})
    body = response.json()

    assert response.status_code == 200
    assert body["filename"] == "values.yaml"
    assert yaml.safe_load(body["content"])["persistence"]["postgres"]["enabled"] is True


def test_render_invalid_descriptor_returns_422(client, descriptor_data):
    descriptor_data["database"]["password"] = "hunter2"

    response = client.post("/api/v1/render/helm", json={"descriptor": descriptor_data})
    detail = response.json()["detail"]

    assert response.status_code == 422
    assert detail["message"].startswith("Descriptor has")
    assert any(error["field_path"] == "database.password" for error in detail["errors"])


def test_render_structural_error_returns_422(client, descriptor_data):
    descriptor_data["ingress"] = {"enabled": "maybe"}

    response = client.post("/api/v1/render/compose", json={"descriptor": descriptor_data})

    assert response.status_code == 422
    assert response.json()["detail"]["errors"][0]["field_path"] == "ingress.enabled"


def test_render_unknown_target(client, descriptor_data):
    response = client.post("/api/v1/render/kustomize", json={"descriptor": descriptor_data})
    assert response.status_code == 422


def test_create_app_configures_logging(monkeypatch):
    monkeypatch.setenv("MATTERDEPLOY_DEBUG", "true")

    with mock.patch("matterdeploy.api.app.logging.basicConfig") as basic_config:
        create_app()

    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG

"""Shared fixtures for matterdeploy tests."""

import copy
import logging

import pytest

from matterdeploy.shared.schemas import DeploymentDescriptor

# The documented single-host deployment: backend, frontend and Postgres
MATTERAI_DESCRIPTOR = {
    "namespace": "matterai",
    "emailDomain": "acme.com",
    "database": {
        "host": "postgres",
        "port": 5432,
        "name": "matter",
        "user": "matter",
        "password": {"name": "postgres-password"},
    },
    "services": [
        {
            "role": "backend",
            "image": "gravitycloud/matter-enterprise:latest",
            "ports": [{"containerPort": 8080, "hostPort": 8080}],
            "resources": {"cpuRequest": "0.25", "cpuLimit": "0.5"},
            "env": {
                "DATABASE_URL": "postgresql://${database.user}@${database.host}:${database.port}/${database.name}",
                "DATABASE_PASSWORD": {"secretRef": {"name": "postgres-password"}},
            },
        },
        {
            "role": "frontend",
            "image": "gravitycloud/matter-enterprise-frontend:latest",
            "ports": [{"containerPort": 3000, "hostPort": 80}],
        },
        {
            "role": "database",
            "image": "postgres:16",
            "ports": [{"containerPort": 5432, "hostPort": 5432}],
        },
    ],
    "persistence": {"size": "10Gi"},
}


@pytest.fixture
def descriptor_data() -> dict:
    """A fresh copy of the matterai descriptor document."""
    return copy.deepcopy(MATTERAI_DESCRIPTOR)


@pytest.fixture
def descriptor(descriptor_data) -> DeploymentDescriptor:
    return DeploymentDescriptor.model_validate(descriptor_data)


@pytest.fixture
def restore_root_logging():
    """Put the root logger back after code that calls setup_logging()."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)

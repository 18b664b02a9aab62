"""Backend API client for the matterdeploy UI.

All HTTP communication with the backend lives here.
"""

import logging
import os

import requests

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

logger = logging.getLogger(__name__)


def validate_descriptor(descriptor: dict, target: str | None = None) -> dict:
    """Ask the backend for every problem in a descriptor.

    Returns dict with ``valid`` and ``errors``; on transport failure ``valid`` is
    False and ``error`` holds the reason.
    """
    try:
        response = requests.post(
            f"{API_BASE_URL}/api/v1/validate",
            json={"descriptor": descriptor, "target": target},
            timeout=10,
        )
        response.raise_for_status()
        return response.json()
    except Exception as e:
        logger.error(f"Failed to validate descriptor: {e}")
        return {"valid": False, "errors": [], "error": str(e)}


def render_document(descriptor: dict, target: str) -> dict:
    """Render a descriptor for one target ("compose" or "helm").

    Returns dict with ``success``. On success it also has ``filename`` and
    ``content``; on validation failure ``errors``; on other failures ``error``.
    """
    try:
        response = requests.post(
            f"{API_BASE_URL}/api/v1/render/{target}",
            json={"descriptor": descriptor},
            timeout=30,
        )
    except requests.RequestException as e:
        logger.error(f"Failed to reach backend at {API_BASE_URL}: {e}")
        return {"success": False, "error": f"Backend not reachable: {e}"}

    if response.status_code == 422:
        detail = response.json().get("detail", {})
        errors = detail.get("errors", []) if isinstance(detail, dict) else []
        return {"success": False, "errors": errors}

    if not response.ok:
        logger.error(f"Render request failed ({response.status_code}): {response.text}")
        return {"success": False, "error": f"Backend error {response.status_code}: {response.text}"}

    data = response.json()
    return {"success": True, "filename": data["filename"], "content": data["content"]}

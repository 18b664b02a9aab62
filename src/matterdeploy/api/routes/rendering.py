"""Descriptor validation and document rendering endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...configuration import OUTPUT_FILENAMES
from ...deployment import DescriptorValidationFailed, descriptor_from_dict
from ...shared.schemas import RenderTarget, ValidationError
from ..dependencies import get_configuration_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["rendering"])


class ValidateRequest(BaseModel):
    """Request to validate a descriptor."""

    descriptor: dict[str, Any]
    target: RenderTarget | None = None


class ValidateResponse(BaseModel):
    """Every problem found in a descriptor."""

    valid: bool
    errors: list[ValidationError]


class RenderRequest(BaseModel):
    """Request to render one deployment document."""

    descriptor: dict[str, Any]


class RenderResponse(BaseModel):
    """Rendered deployment document."""

    target: RenderTarget
    filename: str
    content: str
    success: bool = True


def _validation_failed(errors: list[ValidationError]) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={
            "message": f"Descriptor has {len(errors)} validation error(s)",
            "errors": [error.model_dump(mode="json") for error in errors],
        },
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate_descriptor(request: ValidateRequest):
    """
    Validate a descriptor and report every problem in one pass.

    Structural problems (unknown fields, wrong types) and invariant violations
    are returned together in the same error format.
    """
    try:
        descriptor = descriptor_from_dict(request.descriptor)
    except DescriptorValidationFailed as e:
        return ValidateResponse(valid=False, errors=e.errors)

    result = get_configuration_service().validate(descriptor, request.target)
    logger.info(f"Validated descriptor for namespace '{descriptor.namespace}': {len(result.errors)} error(s)")
    return ValidateResponse(valid=result.is_valid, errors=result.errors)


@router.post("/render/{target}", response_model=RenderResponse)
async def render_document(target: RenderTarget, request: RenderRequest):
    """
    Validate a descriptor and render it for one target.

    Raises:
        HTTPException: 422 with every validation error, or 500 if rendering fails
    """
    try:
        descriptor = descriptor_from_dict(request.descriptor)
        content = get_configuration_service().render(descriptor, target)
    except DescriptorValidationFailed as e:
        logger.info(f"Render request rejected: {len(e.errors)} validation error(s)")
        raise _validation_failed(e.errors) from e
    except Exception as e:
        logger.error(f"Failed to render {target.value} document: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to render {target.value} document: {str(e)}"
        ) from e

    return RenderResponse(target=target, filename=OUTPUT_FILENAMES[target], content=content)

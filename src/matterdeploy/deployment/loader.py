"""Descriptor loading from YAML or JSON documents."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..shared.schemas import DeploymentDescriptor, ValidationError, ValidationErrorKind
from ..shared.schemas.descriptor import DescriptorModel
from .errors import DescriptorLoadError, DescriptorValidationFailed

logger = logging.getLogger(__name__)

UNION_TAGS = {"str", "int", "float", "bool"} | {model.__name__ for model in DescriptorModel.__subclasses__()}


def _format_loc(loc: tuple) -> str:
    """("services", 1, "role") -> "services[1].role"."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "<root>"


def _convert_errors(exc: PydanticValidationError) -> list[ValidationError]:
    errors = []
    for error in exc.errors():
        # Union members add their type name to the location; drop those
        loc = tuple(
            part for part in error["loc"]
            if not (isinstance(part, str) and part in UNION_TAGS)
        )
        kind = (
            ValidationErrorKind.MISSING_FIELD
            if error["type"] == "missing"
            else ValidationErrorKind.INVALID_FORMAT
        )
        errors.append(ValidationError(field_path=_format_loc(loc), kind=kind, message=error["msg"]))
    return errors


def descriptor_from_dict(data: Any) -> DeploymentDescriptor:
    """
    Build a descriptor from parsed YAML/JSON data.

    Structural problems (unknown fields, wrong types, unknown roles) are reported
    with the same ValidationError records the validator uses.

    Raises:
        DescriptorLoadError: If the document is not a mapping
        DescriptorValidationFailed: If the data does not fit the descriptor shape
    """
    if not isinstance(data, dict):
        raise DescriptorLoadError(
            f"Descriptor must be a mapping at the top level, got {type(data).__name__}"
        )

    try:
        return DeploymentDescriptor.model_validate(data)
    except PydanticValidationError as e:
        errors = _convert_errors(e)
        logger.info(f"Descriptor document has {len(errors)} structural error(s)")
        raise DescriptorValidationFailed(errors) from e


def load_descriptor(path: str | Path) -> DeploymentDescriptor:
    """
    Load a descriptor from a .yaml, .yml or .json file.

    Raises:
        DescriptorLoadError: If the file cannot be read or parsed
        DescriptorValidationFailed: If the data does not fit the descriptor shape
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise DescriptorLoadError(f"Cannot read descriptor file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DescriptorLoadError(f"Invalid descriptor syntax in {path}: {e}") from e

    logger.info(f"Loaded descriptor from {path}")
    return descriptor_from_dict(data)

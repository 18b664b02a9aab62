"""Validation error schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class ValidationErrorKind(str, Enum):
    """Machine-readable category of a descriptor problem."""

    MISSING_FIELD = "MissingField"
    INVALID_FORMAT = "InvalidFormat"
    RANGE_VIOLATION = "RangeViolation"
    MUTUAL_EXCLUSION_VIOLATION = "MutualExclusionViolation"
    DUPLICATE_VALUE = "DuplicateValue"


class ValidationError(BaseModel):
    """A single violated descriptor invariant."""

    field_path: str = Field(..., description="Dotted path, e.g. services[1].resources.cpuRequest")
    kind: ValidationErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.field_path}: {self.message} ({self.kind.value})"

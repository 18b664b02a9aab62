"""Exceptions raised by the deployment core and its callers."""

from ..shared.schemas import ValidationError


class ContractViolation(Exception):
    """Raised when a renderer is called with input the validator did not accept.

    This is a programming error in the caller, never a user input problem.
    """
    pass


class DescriptorValidationFailed(Exception):
    """Raised by service layers when a descriptor has validation errors."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = errors
        summary = "; ".join(str(e) for e in errors)
        super().__init__(f"Descriptor has {len(errors)} validation error(s): {summary}")


class DescriptorLoadError(Exception):
    """Raised when a descriptor file cannot be read or parsed."""
    pass

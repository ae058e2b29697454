"""
DisasterAlert - Domain Exceptions
Precondition violations surfaced to callers; provider failures never are.
"""


class DisasterAlertError(Exception):
    """Base class for errors raised by DisasterAlert."""


class PreconditionError(DisasterAlertError, ValueError):
    """Caller supplied an unacceptable request. Nothing was persisted."""


class MissingPhotoError(PreconditionError):
    """A report was submitted without a photo."""

    def __init__(self, message: str = "Camera image is required. Report cannot be accepted."):
        super().__init__(message)


class MissingFieldError(PreconditionError):
    """A required report field is missing or blank."""


class InvalidCategoryError(PreconditionError):
    """Category is not one of the supported incident categories."""


class InvalidStatusError(PreconditionError):
    """Status is not one of the four workflow values."""


class IncidentNotFoundError(DisasterAlertError, LookupError):
    """No incident with the requested id."""

"""Errors raised by the FHIR client, the collector and the patient helpers."""
from __future__ import annotations


class FhirError(Exception):
    """Base class for every error this package raises."""


class InvalidArgument(FhirError, ValueError):
    """A required argument (usually a resource id) is missing or malformed."""


class NotFound(FhirError):
    """The server reports that the requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(f"{resource_type}/{resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class TransportError(FhirError):
    """Network or HTTP-level failure, including server error status codes."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def require_id(resource_id: str | None, what: str = "resource id") -> str:
    if not resource_id or not str(resource_id).strip():
        raise InvalidArgument(f"{what} is required")
    return str(resource_id).strip()

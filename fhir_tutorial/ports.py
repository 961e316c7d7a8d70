"""The narrow view of a FHIR server that the collector and helpers depend on."""
from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union

from .models import Bundle

Criteria = Union[Sequence[str], Mapping[str, str], None]


class ResourceClient(Protocol):
    """Implemented by utils.fhir_client.FhirClient and by test fakes."""

    def search(self, resource_type: str, criteria: Criteria = None) -> Bundle:
        """Run a type-level search and return the first page."""
        ...

    def continue_page(self, bundle: Bundle) -> Bundle | None:
        """Follow the page's next link, or return None on the last page."""
        ...

    def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        ...

    def create(self, resource_type: str, resource: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def update(self, resource_type: str, resource: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def delete(self, resource_type: str, resource_id: str) -> None:
        ...

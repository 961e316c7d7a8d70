# fhir_tutorial/models.py
"""Thin pydantic views over the FHIR JSON this package touches.

Only the elements we read or write are declared; everything else rides
along as extras so a read → modify → update round trip keeps it.
"""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import TransportError

M = TypeVar("M", bound=BaseModel)


class _Element(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_fhir(self) -> dict[str, Any]:
        # FHIR forbids empty arrays and nulls
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude_defaults=True)


class HumanName(_Element):
    use: str | None = None
    text: str | None = None
    family: str | None = None
    given: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        if self.text:
            return self.text
        return " ".join([*self.given, self.family or ""]).strip()


class ContactPoint(_Element):
    system: str | None = None
    value: str | None = None
    use: str | None = None


class Patient(_Element):
    resource_type: str = Field(default="Patient", alias="resourceType")
    id: str | None = None
    name: list[HumanName] = Field(default_factory=list)
    telecom: list[ContactPoint] = Field(default_factory=list)
    birth_date: str | None = Field(default=None, alias="birthDate")

    @property
    def display_name(self) -> str | None:
        return str(self.name[0]) if self.name else None

    def to_fhir(self) -> dict[str, Any]:
        return {"resourceType": self.resource_type, **super().to_fhir()}


class BundleLink(_Element):
    relation: str
    url: str


class BundleEntry(_Element):
    full_url: str | None = Field(default=None, alias="fullUrl")
    resource: dict[str, Any] | None = None


class Bundle(_Element):
    """One page of search results (a ResultPage)."""

    total: int | None = None
    entry: list[BundleEntry] = Field(default_factory=list)
    link: list[BundleLink] = Field(default_factory=list)

    @property
    def next_url(self) -> str | None:
        for link in self.link:
            if link.relation == "next":
                return link.url
        return None

    @property
    def match_count(self) -> int:
        """Server-reported total, or the entry count when the server omits it."""
        return self.total if self.total is not None else len(self.entry)


def parse(model: type[M], data: Any, source: str, status_code: int | None = None) -> M:
    """Validate server JSON; a malformed payload is a protocol failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TransportError(f"{source} is not a valid {model.__name__}: {e}", status_code=status_code) from e

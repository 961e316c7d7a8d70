"""Shared fixtures: an in-memory stand-in for a FHIR server behind the ResourceClient interface."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from fhir_tutorial.config import Settings
from fhir_tutorial.errors import NotFound
from fhir_tutorial.models import Bundle


def patient(pid: str, family: str = "Test", given: str = "Pat") -> dict[str, Any]:
    return {"resourceType": "Patient", "id": pid, "name": [{"family": family, "given": [given]}]}


class FakeFhirServer:
    """Serves fixed Patient pages and per-patient Encounter totals; records every call."""

    def __init__(
        self,
        pages: list[list[dict[str, Any] | None]] | None = None,
        encounters: dict[str, int] | None = None,
        omit_total: bool = False,
    ) -> None:
        self.pages = pages or [[]]
        self.encounters = encounters or {}
        self.omit_total = omit_total
        self.store: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self._ids = itertools.count(100)

    # ── paging ──────────────────────────────────────────────────
    def _page(self, index: int) -> Bundle:
        entries = [
            {"fullUrl": f"http://fake/Patient/{r['id']}" if r and "id" in r else None, "resource": r}
            for r in self.pages[index]
        ]
        links = [{"relation": "self", "url": f"http://fake/Patient?page={index}"}]
        if index + 1 < len(self.pages):
            links.append({"relation": "next", "url": f"http://fake/Patient?page={index + 1}"})
        total = None if self.omit_total else sum(len(p) for p in self.pages)
        return Bundle.model_validate({"total": total, "entry": entries, "link": links})

    def search(self, resource_type: str, criteria: Any = None) -> Bundle:
        self.calls.append(("search", (resource_type, criteria)))
        if resource_type == "Encounter":
            pid = criteria["patient"].split("/", 1)[1]
            count = self.encounters.get(pid, 0)
            entries = [{"resource": {"resourceType": "Encounter", "id": f"{pid}-e{i}"}} for i in range(count)]
            return Bundle.model_validate({"total": None if self.omit_total else count, "entry": entries})
        return self._page(0)

    def continue_page(self, bundle: Bundle) -> Bundle | None:
        url = bundle.next_url
        if url is None:
            return None
        self.calls.append(("continue", url))
        return self._page(int(url.rsplit("=", 1)[1]))

    # ── CRUD ────────────────────────────────────────────────────
    def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        self.calls.append(("read", resource_id))
        if resource_id not in self.store:
            raise NotFound(resource_type, resource_id)
        return dict(self.store[resource_id])

    def create(self, resource_type: str, resource: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", resource))
        created = {**resource, "id": str(next(self._ids))}
        self.store[created["id"]] = created
        return dict(created)

    def update(self, resource_type: str, resource: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("update", resource))
        updated = {**resource, "meta": {"versionId": "2"}}
        self.store[resource["id"]] = updated
        return dict(updated)

    def delete(self, resource_type: str, resource_id: str) -> None:
        self.calls.append(("delete", resource_id))
        if self.store.pop(resource_id, None) is None:
            raise NotFound(resource_type, resource_id)

    # ── context manager, as FhirClient ──────────────────────────
    def __enter__(self) -> "FakeFhirServer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        pass

    def encounter_lookups(self) -> list[str]:
        return [c[1][1]["patient"] for c in self.calls if c[0] == "search" and c[1][0] == "Encounter"]


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.delenv("FHIR_BASE_URL", raising=False)
    monkeypatch.delenv("FHIR_SERVER", raising=False)
    monkeypatch.delenv("FHIR_BEARER_TOKEN", raising=False)
    return Settings()

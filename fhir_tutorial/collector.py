# fhir_tutorial/collector.py
"""Walk a paged search and keep the primary resources that pass a related-resource filter.

The default wiring is Patient → Encounter via the ``patient`` search
parameter, i.e. "patients that have at least one encounter".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from .config import Settings
from .errors import InvalidArgument
from .models import Bundle, BundleEntry, Patient, parse
from .ports import Criteria, ResourceClient

log = logging.getLogger(__name__)


@dataclass
class CollectionState:
    max_results: int
    resources: list[Patient] = field(default_factory=list)
    examined: int = 0
    matched_related: int = 0

    def add(self, patient: Patient) -> None:
        self.resources.append(patient)

    def is_full(self) -> bool:
        return len(self.resources) >= self.max_results


class PagedFilterCollector:
    def __init__(
        self,
        client: ResourceClient,
        settings: Settings,
        *,
        primary_type: str = "Patient",
        related_type: str = "Encounter",
        related_param: str = "patient",
    ) -> None:
        self.client = client
        self.settings = settings
        self.primary_type = primary_type
        self.related_type = related_type
        self.related_param = related_param

    def collect(
        self,
        criteria: Criteria = None,
        max_results: int | None = None,
        filter_by_related: bool = False,
    ) -> list[Patient]:
        """Return up to ``max_results`` primary resources in server order.

        With ``filter_by_related`` only resources that have at least one
        related resource are kept. Pages are fetched lazily, so reaching the
        limit mid-page never requests the next page. Client errors propagate.
        """
        if max_results is None:
            max_results = self.settings.max_results
        if max_results < 0:
            raise InvalidArgument(f"max_results must be >= 0, got {max_results}")

        state = CollectionState(max_results=max_results)
        if state.is_full():
            return state.resources

        for entry in self._entries(criteria):
            patient = parse(Patient, entry.resource, f"Entry {entry.full_url or state.examined}")
            state.examined += 1

            if filter_by_related or self.settings.related_diagnostics:
                related = self.related_count(patient.id)
                log.info("%s/%s: %s total %d", self.primary_type, patient.id, self.related_type, related)
                if filter_by_related and related == 0:
                    continue
                if related > 0:
                    state.matched_related += 1

            state.add(patient)
            log.info(
                "- Entry %3d: %s id=%s name=%s",
                state.examined - 1, entry.full_url, patient.id, patient.display_name,
            )
            if state.is_full():
                break

        log.info(
            "Collected %d of %d examined %s resources",
            len(state.resources), state.examined, self.primary_type,
        )
        return state.resources

    def related_count(self, resource_id: str | None) -> int:
        bundle = self.client.search(
            self.related_type,
            {self.related_param: f"{self.primary_type}/{resource_id}"},
        )
        return bundle.match_count

    def _pages(self, criteria: Criteria) -> Iterator[Bundle]:
        page: Bundle | None = self.client.search(self.primary_type, criteria)
        while page is not None:
            log.info("Total: %s Entry count: %d", page.total, len(page.entry))
            yield page
            page = self.client.continue_page(page)

    def _entries(self, criteria: Criteria) -> Iterator[BundleEntry]:
        for page in self._pages(criteria):
            for entry in page.entry:
                if not entry.resource:
                    continue
                if entry.resource.get("resourceType", self.primary_type) != self.primary_type:
                    log.debug("Skipping %s entry %s", entry.resource.get("resourceType"), entry.full_url)
                    continue
                yield entry

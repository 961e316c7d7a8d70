# fhir_tutorial/utils/fhir_client.py
from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from ..config import Settings
from ..errors import InvalidArgument, NotFound, TransportError, require_id
from ..models import Bundle, parse
from ..ports import Criteria

log = logging.getLogger(__name__)

FHIR_JSON = "application/fhir+json"
_GONE = (404, 410)


def criteria_params(criteria: Criteria) -> list[tuple[str, str]]:
    """Turn ``["name=test"]`` or ``{"name": "test"}`` into query params."""
    if not criteria:
        return []
    if isinstance(criteria, Mapping):
        return [(str(k), str(v)) for k, v in criteria.items()]
    params = []
    for item in criteria:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidArgument(f"Search criterion must look like key=value, got {item!r}")
        params.append((key, value))
    return params


class FhirClient:
    """Synchronous FHIR REST client (search, paging, CRUD) on top of httpx."""

    def __init__(
        self,
        base_url: str,
        *,
        bearer_token: str | None = None,
        timeout_s: float = 30.0,
        prefer_return: str = "representation",
        page_size: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": FHIR_JSON,
            "Content-Type": FHIR_JSON,
            "Prefer": f"return={prefer_return}",
        }
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self._http = httpx.Client(
            base_url=self.base_url + "/",
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "FhirClient":
        return cls(
            settings.base_url,
            bearer_token=settings.bearer_token,
            timeout_s=settings.timeout_s,
            prefer_return=settings.prefer_return,
            page_size=settings.page_size,
            **kwargs,
        )

    # ── lifecycle ───────────────────────────────────────────────
    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "FhirClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── transport ───────────────────────────────────────────────
    def _request(
        self,
        method: str,
        url: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Mapping[str, Any] | None = None,
        gone: tuple[str, str] | None = None,
    ) -> httpx.Response:
        log.debug("%s %s params=%s", method, url, params)
        try:
            r = self._http.request(method, url, params=params or None, json=json)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        if gone and r.status_code in _GONE:
            raise NotFound(*gone)
        try:
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method} {url} returned HTTP {r.status_code}: {r.text[:300]}",
                status_code=r.status_code,
            ) from e
        return r

    @staticmethod
    def _json(r: httpx.Response) -> dict[str, Any] | None:
        if not r.content:
            return None
        try:
            body = r.json()
        except ValueError as e:
            raise TransportError(f"Response from {r.request.url} is not JSON", status_code=r.status_code) from e
        if not isinstance(body, dict):
            raise TransportError(
                f"Response from {r.request.url} is not a FHIR resource: {type(body).__name__}",
                status_code=r.status_code,
            )
        return body

    # ── search / paging ─────────────────────────────────────────
    def _bundle(self, r: httpx.Response) -> Bundle:
        return parse(Bundle, self._json(r) or {}, f"Response from {r.request.url}", status_code=r.status_code)

    def search(self, resource_type: str, criteria: Criteria = None) -> Bundle:
        params = criteria_params(criteria)
        if self.page_size and not any(k == "_count" for k, _ in params):
            params.append(("_count", str(self.page_size)))
        r = self._request("GET", resource_type, params=params)
        return self._bundle(r)

    def continue_page(self, bundle: Bundle) -> Bundle | None:
        url = bundle.next_url
        if not url:
            return None
        r = self._request("GET", url)
        return self._bundle(r)

    # ── CRUD ────────────────────────────────────────────────────
    def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        resource_id = require_id(resource_id)
        r = self._request("GET", f"{resource_type}/{resource_id}", gone=(resource_type, resource_id))
        return self._json(r) or {}

    def create(self, resource_type: str, resource: Mapping[str, Any]) -> dict[str, Any]:
        r = self._request("POST", resource_type, json=resource)
        body = self._json(r)
        if body is None:
            # Prefer was ignored (or return=minimal): follow Location
            return self._read_location(resource_type, r.headers.get("Location"))
        return body

    def update(self, resource_type: str, resource: Mapping[str, Any]) -> dict[str, Any]:
        resource_id = require_id(resource.get("id"))
        r = self._request("PUT", f"{resource_type}/{resource_id}", json=resource)
        return self._json(r) or dict(resource)

    def delete(self, resource_type: str, resource_id: str) -> None:
        resource_id = require_id(resource_id)
        self._request("DELETE", f"{resource_type}/{resource_id}", gone=(resource_type, resource_id))

    def _read_location(self, resource_type: str, location: str | None) -> dict[str, Any]:
        # Location: <base>/Patient/123/_history/1
        parts = (location or "").rstrip("/").split("/")
        if resource_type not in parts or parts.index(resource_type) + 1 >= len(parts):
            raise TransportError(f"Created {resource_type} but the server returned no body or Location")
        return self.read(resource_type, parts[parts.index(resource_type) + 1])

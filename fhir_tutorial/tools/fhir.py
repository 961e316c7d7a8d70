# fhir_tutorial/tools/fhir.py
from __future__ import annotations

import json
from typing import Any

from ..mcp_app import mcp  # shared FastMCP instance
from ..config import get_settings
from ..collector import PagedFilterCollector
from ..models import Patient
from ..patients import add_telecom, create_patient, delete_patient, read_patient, update_patient
from ..utils.fhir_client import FhirClient


def _client() -> FhirClient:
    return FhirClient.from_settings(get_settings())


def _dump(resource: Patient | list[Patient]) -> str:
    data: Any = [p.to_fhir() for p in resource] if isinstance(resource, list) else resource.to_fhir()
    return json.dumps(data, separators=(",", ":"))


def _capped(max_results: int | None) -> int | None:
    lim = get_settings().limit_for("fhir_collect_patients")
    if lim is None or lim.max_results is None:
        return max_results
    return lim.max_results if max_results is None else min(max_results, lim.max_results)


# ─────────────────────────── fhir_collect_patients ────────────────────
def fhir_collect_patients(
    criteria: str = "",
    max_results: int | None = None,
    only_with_encounters: bool = False,
) -> str:
    terms = [t for t in criteria.split("&") if t]
    with _client() as client:
        collector = PagedFilterCollector(client, get_settings())
        patients = collector.collect(terms, _capped(max_results), only_with_encounters)
    return _dump(patients)


# ───────────────────────────── fhir_read_patient ──────────────────────
def fhir_read_patient(patient_id: str) -> str:
    with _client() as client:
        return _dump(read_patient(client, patient_id))


# ──────────────────────────── fhir_create_patient ─────────────────────
def fhir_create_patient(family_name: str, given_name: str, birth_date: str | None = None) -> str:
    with _client() as client:
        return _dump(create_patient(client, family_name, given_name, birth_date))


# ───────────────────────── fhir_add_patient_telecom ───────────────────
def fhir_add_patient_telecom(patient_id: str, system: str, value: str, use: str | None = None) -> str:
    with _client() as client:
        patient = add_telecom(read_patient(client, patient_id), system, value, use)
        return _dump(update_patient(client, patient))


# ──────────────────────────── fhir_delete_patient ─────────────────────
def fhir_delete_patient(patient_id: str) -> str:
    with _client() as client:
        delete_patient(client, patient_id)
    return "deleted"


_DESCRIPTIONS = {
    fhir_collect_patients: (
        "Page through a Patient search and return up to `max_results` patients as JSON. "
        "`criteria` is a query string such as 'name=test&gender=female'. "
        "With `only_with_encounters`, patients without any Encounter are skipped."
    ),
    fhir_read_patient: "Read one Patient by id. Returns the resource JSON.",
    fhir_create_patient: "Create a Patient with one family and one given name. Returns the created resource.",
    fhir_add_patient_telecom: (
        "Append a telecom entry (system e.g. 'phone' or 'email') to a Patient and update it on the server."
    ),
    fhir_delete_patient: "Delete a Patient by id.",
}

for _fn, _description in _DESCRIPTIONS.items():
    if _fn.__name__ in get_settings().enabled:
        mcp.tool(name=_fn.__name__, description=_description)(_fn)

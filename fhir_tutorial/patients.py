# fhir_tutorial/patients.py
"""One-line Patient CRUD helpers over a ResourceClient."""
from __future__ import annotations

import logging

from .errors import require_id
from .models import ContactPoint, HumanName, Patient, parse
from .ports import ResourceClient

log = logging.getLogger(__name__)

PATIENT = "Patient"


def read_patient(client: ResourceClient, patient_id: str) -> Patient:
    patient = parse(Patient, client.read(PATIENT, require_id(patient_id, "patient id")), "Read response")
    log.info("Read Patient/%s name=%s", patient.id, patient.display_name)
    return patient


def create_patient(
    client: ResourceClient,
    family_name: str,
    given_name: str,
    birth_date: str | None = None,
) -> Patient:
    """Create a Patient with a single name; the server assigns the id."""
    to_create = Patient(
        name=[HumanName(family=family_name, given=[given_name])],
        birth_date=birth_date,
    )
    created = parse(Patient, client.create(PATIENT, to_create.to_fhir()), "Create response")
    log.info("Created Patient/%s", created.id)
    return created


def add_telecom(patient: Patient, system: str, value: str, use: str | None = None) -> Patient:
    patient.telecom.append(ContactPoint(system=system, value=value, use=use))
    return patient


def update_patient(client: ResourceClient, patient: Patient) -> Patient:
    require_id(patient.id, "patient id")
    updated = parse(Patient, client.update(PATIENT, patient.to_fhir()), "Update response")
    log.info("Updated Patient/%s", updated.id)
    return updated


def delete_patient(client: ResourceClient, patient_id: str) -> None:
    patient_id = require_id(patient_id, "patient id")
    client.delete(PATIENT, patient_id)
    log.info("Deleted Patient/%s", patient_id)

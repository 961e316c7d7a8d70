"""Patient CRUD helpers over the in-memory fake server."""

import pytest

from conftest import FakeFhirServer, patient
from fhir_tutorial.errors import InvalidArgument, NotFound
from fhir_tutorial.models import Patient
from fhir_tutorial.patients import add_telecom, create_patient, delete_patient, read_patient, update_patient


def test_create_sends_single_name_and_returns_server_id() -> None:
    server = FakeFhirServer()
    created = create_patient(server, "Chalmers", "Peter", birth_date="1970-01-01")

    assert created.id == "100"
    assert created.display_name == "Peter Chalmers"
    assert server.calls[0] == (
        "create",
        {
            "resourceType": "Patient",
            "name": [{"family": "Chalmers", "given": ["Peter"]}],
            "birthDate": "1970-01-01",
        },
    )


def test_create_omits_empty_elements() -> None:
    server = FakeFhirServer()
    create_patient(server, "Doe", "Jane")

    sent = server.calls[0][1]
    assert "birthDate" not in sent
    assert "telecom" not in sent


def test_read_returns_patient() -> None:
    server = FakeFhirServer()
    server.store["p1"] = patient("p1", family="Smith", given="Ann")

    assert read_patient(server, "p1").display_name == "Ann Smith"


def test_read_empty_id_is_invalid() -> None:
    server = FakeFhirServer()
    with pytest.raises(InvalidArgument):
        read_patient(server, "")
    assert server.calls == []


def test_read_missing_is_not_found() -> None:
    with pytest.raises(NotFound):
        read_patient(FakeFhirServer(), "missing-id")


def test_add_telecom_then_update_keeps_unknown_elements() -> None:
    server = FakeFhirServer()
    server.store["p1"] = {**patient("p1"), "gender": "female", "meta": {"versionId": "1"}}

    p = add_telecom(read_patient(server, "p1"), "phone", "555.555.5555", "home")
    updated = update_patient(server, p)

    sent = server.calls[-1][1]
    assert sent["gender"] == "female"
    assert sent["telecom"] == [{"system": "phone", "value": "555.555.5555", "use": "home"}]
    assert updated.telecom[0].value == "555.555.5555"
    assert updated.model_extra["meta"] == {"versionId": "2"}


def test_update_without_id_is_invalid() -> None:
    with pytest.raises(InvalidArgument):
        update_patient(FakeFhirServer(), Patient())


def test_delete() -> None:
    server = FakeFhirServer()
    server.store["p1"] = patient("p1")

    delete_patient(server, "p1")

    assert "p1" not in server.store
    with pytest.raises(NotFound):
        delete_patient(server, "p1")
    with pytest.raises(InvalidArgument):
        delete_patient(server, " ")

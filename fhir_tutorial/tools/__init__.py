# fhir_tutorial/tools/__init__.py
from importlib import import_module

ALL = {
    "fhir_collect_patients": "fhir_tutorial.tools.fhir",
    "fhir_read_patient": "fhir_tutorial.tools.fhir",
    "fhir_create_patient": "fhir_tutorial.tools.fhir",
    "fhir_add_patient_telecom": "fhir_tutorial.tools.fhir",
    "fhir_delete_patient": "fhir_tutorial.tools.fhir",
}


def load(tool_name: str):
    """Import the module that registers the requested tool."""
    mod_path = ALL[tool_name]
    return import_module(mod_path)  # registration side-effect

# fhir_tutorial/__init__.py
__all__ = [
    "FhirClient",
    "PagedFilterCollector",
    "Settings",
    "get_settings",
    "__version__",
]

__version__ = "0.1.0"

from importlib.metadata import version, PackageNotFoundError

try:                      # If installed as a package
    __version__ = version("fhir-tutorial")
except PackageNotFoundError:
    pass

from .config import Settings, get_settings
from .collector import PagedFilterCollector
from .utils.fhir_client import FhirClient

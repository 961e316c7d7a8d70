"""
Command line entry point.
Run: python -m fhir_tutorial patients --criteria name=test --with-encounters
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from pydantic import ValidationError

from .collector import PagedFilterCollector
from .config import Settings, get_settings
from .errors import FhirError
from .models import Patient
from .patients import add_telecom, create_patient, delete_patient, read_patient, update_patient
from .utils.fhir_client import FhirClient

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> FhirClient:
    return FhirClient.from_settings(settings)


def _emit(data: Any) -> None:
    if isinstance(data, Patient):
        data = data.to_fhir()
    elif isinstance(data, list):
        data = [p.to_fhir() for p in data]
    print(json.dumps(data, indent=2))


def _cmd_patients(client: FhirClient, settings: Settings, args: argparse.Namespace) -> Any:
    collector = PagedFilterCollector(client, settings)
    return collector.collect(args.criteria, args.max_results, args.with_encounters)


def _cmd_read(client: FhirClient, settings: Settings, args: argparse.Namespace) -> Any:
    return read_patient(client, args.id)


def _cmd_create(client: FhirClient, settings: Settings, args: argparse.Namespace) -> Any:
    return create_patient(client, args.family, args.given, args.birth_date)


def _cmd_update(client: FhirClient, settings: Settings, args: argparse.Namespace) -> Any:
    patient = add_telecom(read_patient(client, args.id), args.system, args.value, args.use)
    return update_patient(client, patient)


def _cmd_delete(client: FhirClient, settings: Settings, args: argparse.Namespace) -> Any:
    delete_patient(client, args.id)
    return {"deleted": f"Patient/{args.id}"}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fhir-tutorial", description="Search and edit Patients on a FHIR server.")
    ap.add_argument("--server", help="Named server from settings (e.g. PublicVonk, PublicHapi)")
    ap.add_argument("--base-url", help="FHIR base URL; overrides --server")
    ap.add_argument("--log-level", default=None)
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("patients", help="Page through a Patient search")
    p.add_argument("--criteria", action="append", default=[], metavar="KEY=VALUE")
    p.add_argument("--max-results", type=int, default=None)
    p.add_argument("--with-encounters", action="store_true", help="Keep only patients with encounters")
    p.set_defaults(func=_cmd_patients)

    p = sub.add_parser("read", help="Read a Patient")
    p.add_argument("id")
    p.set_defaults(func=_cmd_read)

    p = sub.add_parser("create", help="Create a Patient")
    p.add_argument("--family", required=True)
    p.add_argument("--given", required=True)
    p.add_argument("--birth-date", default=None)
    p.set_defaults(func=_cmd_create)

    p = sub.add_parser("update", help="Add a telecom entry to a Patient")
    p.add_argument("id")
    p.add_argument("--system", default="phone")
    p.add_argument("--value", required=True)
    p.add_argument("--use", default=None)
    p.set_defaults(func=_cmd_update)

    p = sub.add_parser("delete", help="Delete a Patient")
    p.add_argument("id")
    p.set_defaults(func=_cmd_delete)

    sub.add_parser("serve", help="Run the MCP server")
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {k: v for k, v in (("server", args.server), ("fhir_base_url", args.base_url)) if v}
    try:
        settings = get_settings()
        if overrides:
            settings = Settings(**{**settings.model_dump(), **overrides})
    except ValidationError as e:
        raise SystemExit(f"error: invalid settings: {e}")

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=(args.log_level or settings.log_level).upper(),
    )

    if args.command == "serve":
        from .server import run  # pylint: disable=import-outside-toplevel
        run(settings)
        return 0

    try:
        with build_client(settings) as client:
            result = args.func(client, settings, args)
    except FhirError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        raise SystemExit(f"error: {e}")
    _emit(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

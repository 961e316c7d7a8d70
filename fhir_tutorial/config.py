# fhir_tutorial/config.py
from __future__ import annotations

import os
from pathlib import Path
from functools import lru_cache
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

DEFAULT_SERVERS: dict[str, str] = {
    "PublicVonk": "http://vonk.fire.ly",
    "PublicHapi": "http://hapi.fhir.org/baseR4/",
}


class ToolLimit(BaseModel):
    max_results: int | None = Field(default=None, ge=0)
    timeout_s: int | None = Field(default=30, ge=1)


class Settings(BaseModel):
    # ── tool toggles ─────────────────────────────────────────────
    enabled: list[str] = Field(default_factory=list)

    # ── per-tool limits ─────────────────────────────────────────
    limits: dict[str, ToolLimit] = Field(default_factory=dict)

    # ── FHIR server selection ───────────────────────────────────
    servers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SERVERS))
    server: str = Field(default_factory=lambda: os.getenv("FHIR_SERVER", "PublicVonk"))
    fhir_base_url: str | None = Field(default_factory=lambda: os.getenv("FHIR_BASE_URL"))
    bearer_token: str | None = Field(default_factory=lambda: os.getenv("FHIR_BEARER_TOKEN"))

    # ── transport ───────────────────────────────────────────────
    timeout_s: float = Field(default=30.0, gt=0)
    prefer_return: Literal["minimal", "representation", "OperationOutcome"] = "representation"

    # ── collection ──────────────────────────────────────────────
    page_size: int | None = Field(default=None, ge=1)
    max_results: int = Field(default=2, ge=0)
    related_diagnostics: bool = False

    log_level: str = Field(default_factory=lambda: os.getenv("FHIR_LOG_LEVEL", "INFO"))

    @model_validator(mode="after")
    def _check_server(self) -> "Settings":
        if not self.fhir_base_url and self.server not in self.servers:
            raise ValueError(
                f"Unknown FHIR server {self.server!r} (known: {sorted(self.servers)})"
            )
        return self

    @property
    def base_url(self) -> str:
        """Explicit override first, then the named server table."""
        return self.fhir_base_url or self.servers[self.server]

    def limit_for(self, tool_name: str) -> ToolLimit | None:
        return self.limits.get(tool_name)


def load_settings(path: Path | None = None) -> Settings:
    yaml_path = path or Path(os.getenv("FHIR_TUTORIAL_CONFIG") or Path(__file__).with_name("settings.yaml"))
    raw = yaml.safe_load(yaml_path.read_text()) if yaml_path.exists() else None
    return Settings(**(raw or {}))


_active: Settings | None = None


def use_settings(settings: Settings | None) -> None:
    """Make `settings` what get_settings() returns; None goes back to the file."""
    global _active
    _active = settings
    _load_cached.cache_clear()


@lru_cache(maxsize=1)
def _load_cached() -> Settings:
    return load_settings()


def get_settings() -> Settings:
    return _active if _active is not None else _load_cached()

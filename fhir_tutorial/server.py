# fhir_tutorial/server.py
from __future__ import annotations
import os
from typing import List

from .mcp_app import mcp
from .config import Settings, get_settings, use_settings
from .tools import load as load_tool, ALL as ALL_TOOLS

_loaded_tools: List[str] = []


def load_tools() -> List[str]:
    """Import (and so register) every tool enabled in the active settings."""
    for tool_name in get_settings().enabled:
        if tool_name not in ALL_TOOLS:
            raise RuntimeError(f"Unknown tool {tool_name!r} in settings.yaml (allowed: {sorted(ALL_TOOLS)})")
        if tool_name not in _loaded_tools:
            load_tool(tool_name)
            _loaded_tools.append(tool_name)
    return _loaded_tools


@mcp.custom_route("/health", methods=["GET"])
async def health(_req):
    from starlette.responses import PlainTextResponse
    return PlainTextResponse("OK")


@mcp.custom_route("/", methods=["GET"])
async def root(_req):
    from starlette.responses import JSONResponse
    return JSONResponse(
        {"name": "fhir-tutorial", "fhir_server": get_settings().base_url, "tools": sorted(_loaded_tools)}
    )


def run(settings: Settings | None = None) -> None:
    if settings is not None:
        use_settings(settings)
    load_tools()
    # Streamable HTTP so clients can connect via a container port
    host = os.getenv("MCP_HOST", "0.0.0.0")
    port = int(os.getenv("MCP_PORT", "8000"))
    path = os.getenv("MCP_HTTP_PATH", "/mcp")
    mcp.run(transport="http", host=host, port=port, path=path)


if __name__ == "__main__":
    run()

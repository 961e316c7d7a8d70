# fhir_tutorial/mcp_app.py
from fastmcp import FastMCP

mcp = FastMCP("fhir-tutorial")

"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from loglens.app import LogLens
from loglens.core.reports import ClassificationReport, ScanReport, TailEventReport


def levels_table(lens: LogLens) -> list[dict[str, Any]]:
    """Describe the active levels, their styles and matcher patterns."""
    return [
        {
            "name": level.name.value,
            "rank": level.rank,
            "color": level.style.color,
            "background": level.style.background,
            "overview_ruler": level.style.overview_ruler,
            "matchers": [{"kind": m.kind, "pattern": m.pattern.pattern} for m in level.matchers],
        }
        for level in lens.rules
    ]


def register_resources(mcp: FastMCP, lens: LogLens) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://loglens/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        return (
            "Resources:\n"
            "- app://loglens/help\n"
            "- app://loglens/config/levels\n"
            "- app://loglens/config/settings\n"
            "- app://loglens/schemas/scan-report\n"
            "- app://loglens/schemas/classification\n"
            "- app://loglens/schemas/tail-event\n"
            "- app://loglens/tails\n"
        )

    @mcp.resource("app://loglens/config/levels")
    def levels() -> list[dict[str, Any]]:
        """Return the level table, most severe first."""
        return levels_table(lens)

    @mcp.resource("app://loglens/config/settings")
    def settings() -> dict[str, Any]:
        """Return the effective configuration."""
        return lens.config.as_settings()

    @mcp.resource("app://loglens/schemas/scan-report")
    def scan_report_schema() -> dict[str, Any]:
        return ScanReport.model_json_schema()

    @mcp.resource("app://loglens/schemas/classification")
    def classification_schema() -> dict[str, Any]:
        return ClassificationReport.model_json_schema()

    @mcp.resource("app://loglens/schemas/tail-event")
    def tail_event_schema() -> dict[str, Any]:
        return TailEventReport.model_json_schema()

    @mcp.resource("app://loglens/tails")
    def tails() -> list[str]:
        """Return the paths currently being tailed."""
        return lens.tails.paths()

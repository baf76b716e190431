"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: classify lines, scan documents, filter by level, toggle tailing
- Resources: help text, the active level table, report schemas

Run locally (stdio):
    python -m loglens.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from loglens.app import LogLens
from loglens.resources.registry import register_resources
from loglens.tools.logs import (
    classify_line_impl,
    filter_by_level_impl,
    find_logs_impl,
    scan_document_impl,
    scan_file_impl,
)
from loglens.tools.tail import read_tail_impl, toggle_tail_impl

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("LOGLENS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_server(lens: LogLens) -> FastMCP:
    """Create a FastMCP server whose tools operate on `lens`."""
    mcp = FastMCP("loglens", json_response=True)
    register_resources(mcp, lens)

    @mcp.tool()
    def classify_line(line: str) -> dict[str, Any]:
        """Classify one log line.

        Returns every matched level ("levels", most severe first) and the
        primary level used for counting ("primary", null when nothing matches).
        """
        return classify_line_impl(line=line, scanner=lens.scanner)

    @mcp.tool()
    def scan_document(text: str) -> dict[str, Any]:
        """Scan document text and return per-level line ranges and counts."""
        return scan_document_impl(text=text, scanner=lens.scanner)

    @mcp.tool()
    async def scan_file(log_path: str) -> dict[str, Any]:
        """Scan a log file (plain text or .gz).

        When autoTail is enabled, tailing of the file starts as a side effect.
        """
        return await scan_file_impl(
            log_path=log_path,
            scanner=lens.scanner,
            tails=lens.tails,
            auto_tail=lens.config.auto_tail,
        )

    @mcp.tool()
    async def filter_by_level(
        log_path: str,
        level: str = "ERROR",
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Return lines of a log file matching a level.

        Parameters
        ----------
        level:
            ERROR, WARN, INFO, DEBUG (case-insensitive) or "all".
        limit:
            Maximum number of lines returned (hard-capped in the implementation).
        """
        return await filter_by_level_impl(
            log_path=log_path,
            level=level,
            scanner=lens.scanner,
            limit=limit,
        )

    @mcp.tool()
    def toggle_tail(log_path: str) -> dict[str, Any]:
        """Start tailing a log file, or stop if it is already tailed."""
        return toggle_tail_impl(log_path=log_path, tails=lens.tails, buffer=lens.tail_buffer)

    @mcp.tool()
    def read_tail(log_path: str, max_events: int | None = None) -> dict[str, Any]:
        """Return (and consume) buffered tail events for a file."""
        return read_tail_impl(
            log_path=log_path,
            tails=lens.tails,
            buffer=lens.tail_buffer,
            max_events=max_events,
        )

    @mcp.tool()
    def find_logs(root: str, limit: int | None = None) -> list[str]:
        """List *.log files under a directory (node_modules skipped)."""
        return find_logs_impl(root=root, limit=limit)

    @mcp.tool()
    def reload_config() -> dict[str, Any]:
        """Re-read configuration and rebuild the level rules."""
        return lens.reload().as_settings()

    return mcp


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    lens = LogLens.create()
    try:
        build_server(lens).run(transport="stdio")
    finally:
        lens.close()


if __name__ == "__main__":
    main()

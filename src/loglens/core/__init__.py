"""Classification and tailing engine (no MCP dependencies)."""

"""Command-line interface for gbif-mcp."""

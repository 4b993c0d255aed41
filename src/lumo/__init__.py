"""Lumo - local telemetry ingestion daemon for Claude Code."""

__version__ = "0.1.0"

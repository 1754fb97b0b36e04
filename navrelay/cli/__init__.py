"""navrelay CLI — Typer-based command-line interface.

Provides the ``navrelay`` command with subcommands for publishing and
deleting S-100 records through the relay, listing the publication domains
and schemas, and inspecting the local feature store.

All output uses Rich for formatted terminal display.
"""

"""toolstream CLI — Typer-based command-line interface.

Provides the ``toolstream`` command. All output uses Rich for formatted
terminal display.
"""

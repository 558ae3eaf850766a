# src/talosplan/cli/__init__.py
"""
talosplan CLI Package

This package exposes the top-level Typer `app` so tests and the console
entrypoint can import `talosplan.cli.app`.
"""

# Re-export commonly patched symbols for tests
from ..reporters.console_reporter import ConsoleReporter
from .main import app

__all__ = ["app", "ConsoleReporter"]

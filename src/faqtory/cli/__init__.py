# src/faqtory/cli/__init__.py
"""CLI package for faqtory.

The CLI is a thin Typer wrapper around the commands layer.
"""

from faqtory.cli.app import app, console

__all__ = ["app", "console"]

# src/forge_k8s/cli/__init__.py
"""
forge-k8s CLI package

Exposes the top-level Typer `app` for the console entrypoint and tests.
"""

from .main import app

__all__ = ["app"]

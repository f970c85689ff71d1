"""
CLI interface package for Yoke.

This package contains the Typer application and the command routing.
"""

__all__ = ["app"]

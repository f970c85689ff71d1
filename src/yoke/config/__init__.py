"""
Configuration package for Yoke.

This package contains the process-wide runtime settings.
"""

__all__ = ["settings"]

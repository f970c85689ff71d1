"""
Commands package for Yoke.

This package contains the command table and the bundled command
implementations the orchestrator dispatches to.
"""

__all__ = ["registry", "base"]

"""
Utilities package for Yoke.

This package contains shared helpers such as logging setup.
"""

__all__ = ["logging"]

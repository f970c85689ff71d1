"""
Yoke - command-line client for the Aerobatic hosting platform.

This package provides the command lifecycle: argument parsing, concurrent
initialization of credentials and project configuration, command dispatch
and process termination.
"""

__version__ = "0.1.0"
__author__ = "Aerobatic"
__license__ = "MIT"

from typing import Final

# Package metadata
VERSION: Final[str] = __version__
PACKAGE_NAME: Final[str] = "yoke"

__all__ = [
    "__version__",
    "VERSION",
    "PACKAGE_NAME",
]

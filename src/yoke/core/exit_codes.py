"""Exit-code constants returned by the process lifecycle manager."""

SUCCESS: int = 0
"""Command completed, or a kept-alive command was stopped by an interrupt."""

GENERAL_ERROR: int = 1
"""A failure was reported."""

USAGE_ERROR: int = 2
"""The command line could not be understood."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted outside a keep-alive wait (128 + SIGINT)."""

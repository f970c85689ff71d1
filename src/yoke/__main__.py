"""
Entry point for running Yoke as a module.

This allows users to run the CLI using:
    python -m yoke [command] [options]
"""

from yoke.cli.app import main

if __name__ == "__main__":
    main()

"""
Main entry point for the careerhub package.

Usage:
    python -m careerhub [command] [options]

See 'python -m careerhub --help' for available commands.
"""
import sys

from careerhub.cli import main

if __name__ == "__main__":
    sys.exit(main())

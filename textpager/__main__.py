"""Entry point for running textpager as a module.

Usage:
    python -m textpager <command> [options]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())

"""Entry point for running the backend directly.

Usage: python -m aui_backend list
"""

from aui_backend.cli import main_entry

if __name__ == "__main__":
    main_entry()

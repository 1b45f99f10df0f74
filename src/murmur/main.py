"""Main entry point for the murmur CLI.

Usage:
    python -m murmur.main --help
    murmur --help  # If installed via pip/uv
"""

from murmur.cli import main

if __name__ == "__main__":
    main()

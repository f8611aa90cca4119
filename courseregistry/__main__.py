"""
Package entry point.

Allows running the application via:

    python -m courseregistry

This simply forwards execution to courseregistry.cli.main().
"""

from courseregistry.cli import main

if __name__ == "__main__":
    main()

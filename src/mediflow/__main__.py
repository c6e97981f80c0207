"""Entry point for running mediflow as a module.

This allows the package to be executed as:
    python -m mediflow
"""

from mediflow.cli.main import cli

if __name__ == "__main__":
    cli()

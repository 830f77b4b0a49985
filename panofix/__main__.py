"""Allow ``python -m panofix``."""

from panofix.cli import cli

if __name__ == "__main__":
    cli()

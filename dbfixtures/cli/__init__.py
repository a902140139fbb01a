"""dbfixtures CLI - Command line interface for dbfixtures."""

from dbfixtures.cli.commands import cli


def main() -> None:
    """Main entry point for the dbfixtures CLI."""
    cli()


__all__ = ["main", "cli"]

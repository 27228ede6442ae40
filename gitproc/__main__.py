"""Entry point for running gitproc as a module."""

from gitproc.cli import app


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

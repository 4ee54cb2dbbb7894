"""Main entry point for the quizgenius CLI."""

from quizgenius.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()

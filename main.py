"""Main entry point for quiz-master CLI."""

from quiz_master.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()

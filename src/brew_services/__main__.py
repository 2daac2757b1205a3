"""Entry point for ``python -m brew_services``."""

from brew_services.cli.app import app

if __name__ == "__main__":
    app()

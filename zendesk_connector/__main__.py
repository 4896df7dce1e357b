"""Entry point for python -m zendesk_connector."""

from zendesk_connector.cli import app

if __name__ == "__main__":
    app()

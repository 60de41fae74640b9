"""Entrypoint for running the inventory tracker locally."""
from __future__ import annotations

from .app import create_app
from .config import configure_logging, get_settings


def run() -> None:
    """Convenience wrapper used by ``python -m inventaire.main``."""

    settings = get_settings()
    configure_logging(settings)
    app = create_app(settings)
    app.run(
        host=settings.host,
        port=settings.port,
        debug=settings.environment == "development",
    )


if __name__ == "__main__":
    run()

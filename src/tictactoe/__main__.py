"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import uvicorn

from . import ui
from .config import Settings
from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe web server."""

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    ui.AI_THINK_DELAY = settings.ai_delay
    uvicorn.run(
        ui.app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()

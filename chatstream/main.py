"""Main application entry point.

Runs the NiceGUI chat page, either mounted on the demo FastAPI backend
(port 8000) or on its own against a remote backend (port 8080).
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run the demo backend with NiceGUI mounted on the same server.

    FastAPI serves the streaming /chat endpoint, NiceGUI serves the UI.
    Both accessible on port 8000.
    """
    import uvicorn
    from nicegui import ui

    from chatstream.api.app import create_app
    from chatstream.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()

    ui.run_with(
        app,
        title="Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "chatstream-secret"),
    )

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting integrated server on http://localhost:{port}")
    logger.info(f"Demo backend docs available at http://localhost:{port}/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_ui() -> None:
    """Run only the chat UI against the backend at API_BASE_URL."""
    from chatstream.config import get_client_config
    from chatstream.ui.chat_page import main as run_page

    logger.info(f"Streaming answers from {get_client_config().endpoint}")
    run_page()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=ui to run only the chat page against a remote backend.
    Default is integrated mode (demo backend and UI on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting chatstream in {mode} mode")

    if mode == "ui":
        run_ui()
    else:
        run_integrated()


if __name__ in {"__main__", "__mp_main__"}:
    main()

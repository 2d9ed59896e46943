"""Main application entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from src.services.logging import setup_logging

# Load environment variables before settings are first read
load_dotenv()

logger = logging.getLogger(__name__)


def main():
    """Run the dues API server."""
    from src.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)

    parser = argparse.ArgumentParser(description="HOA dues API server")
    parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    args = parser.parse_args()

    logger.info("Starting Uvicorn server on %s:%d...", args.host, args.port)
    from src.api.app import app

    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()

"""Entry point for Exam Items server."""

import asyncio
import logging

from dotenv import load_dotenv

from .config.settings import Settings
from .logging_config import configure_logging
from .repository import ExamItemRepository
from .server import ExamItemsServer
from .store import create_stores

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the Exam Items server."""
    # Load environment variables
    load_dotenv()

    settings = Settings()
    configure_logging(settings.log.level)

    item_store, response_store = create_stores(settings)
    repository = ExamItemRepository(item_store, response_store)

    server = ExamItemsServer(settings=settings, repository=repository)

    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutdown.")


if __name__ == "__main__":
    main()

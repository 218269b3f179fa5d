"""Run the visa document intake API with uvicorn."""

import uvicorn

from src.api.app import app
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Serving intake API on %s:%d", config.server.host, config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()

import sys

import uvicorn

from product_catalog.core.config import get_settings
from product_catalog.core.errors import ConfigError
from product_catalog.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


def main() -> int:
    configure_logging()
    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("Refusing to start: %s", e)
        return 1

    uvicorn.run("product_catalog.main:app", host="0.0.0.0", port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())

import logging

from agrostock.app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level or settings.log_level)

"""Logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup.

    Args:
        level: Level name such as "DEBUG" or "INFO"

    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQLAlchemy echo is controlled through settings.db_echo, keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

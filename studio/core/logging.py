# studio/core/logging.py
import logging
import logging.config

from studio.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def setup_logging(level: str | None = None) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            # sobe para o handler do root
            "studio": {"level": (level or settings.LOG_LEVEL).upper()},
            # SQL só quando pedido explicitamente
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })

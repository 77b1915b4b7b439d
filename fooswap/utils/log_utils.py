import logging
import logging.config

from fooswap.config.settings import LOG_LEVEL

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "shortname": {"()": "fooswap.utils.shortname.ShortNameFilter"},
    },
    "formatters": {
        "custom": {
            "format": "[%(asctime)s] [%(levelname)s] %(shortname)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "custom",
            "filters": ["shortname"],
        },
    },
    "root": {"level": LOG_LEVEL, "handlers": ["console"]},
    # one line per request is plenty; the indexer thread does the talking
    "loggers": {
        "httpx": {"level": "WARNING"},
    },
}


def configure_logging() -> None:
    logging.config.dictConfig(LOGGING_CONFIG)

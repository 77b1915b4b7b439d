import logging


class ShortNameFilter(logging.Filter):
    """Adds ``record.shortname``: ``fooswap.ingestion.runner`` → ``ingestion-runner``.

    Single-component names (``root``, ``uvicorn``) pass through unchanged.
    """

    def filter(self, record):
        path = record.name.split(".")
        record.shortname = "-".join(path[-2:])
        return True

from typing import Optional


# ---------------------------------------------------------------------------
# Ingestion side
# ---------------------------------------------------------------------------
class IndexerError(Exception):
    """Base class for failures raised on the ingestion path."""


class SourceUnavailable(IndexerError):
    """The remote event source could not be reached or answered garbage.

    Never fatal: the loop gives up on the current tick and tries again on
    the next one.
    """


class MalformedEvent(IndexerError):
    """One raw event did not match the expected wire shape."""

    def __init__(self, reason: str, tx_digest: Optional[str] = None):
        self.reason = reason
        self.tx_digest = tx_digest
        where = f" (tx {tx_digest})" if tx_digest else ""
        super().__init__(f"{reason}{where}")


class StorageError(IndexerError):
    """Local persistence failed while applying an event."""


# ---------------------------------------------------------------------------
# Query API side
# ---------------------------------------------------------------------------
class QueryError(Exception):
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequest(QueryError):
    status_code = 400


class PoolNotFound(QueryError):
    status_code = 404


class ZeroReserve(QueryError):
    # 422: the pool exists but a spot price cannot be derived from it
    status_code = 422

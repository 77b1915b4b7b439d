from sqlalchemy import Column, Integer, BigInteger, String, Index
from fooswap.storage.base import Base
from fooswap.storage.types import Amount


class Swap(Base):
    """One historical swap, written once per distinct ``tx_digest``.

    ``pool_id`` points at :class:`Pool` by value only; there is no foreign
    key so a swap can land before its pool-creation event has been seen.
    """
    __tablename__ = "swaps"

    # surrogate PK
    id         = Column(Integer, primary_key=True, autoincrement=True)
    pool_id    = Column(String, nullable=False)
    sender     = Column(String)                                # NULL when the event omits it
    amount_in  = Column(Amount(), nullable=False)
    amount_out = Column(Amount(), nullable=False)
    timestamp  = Column(BigInteger, nullable=False)            # ms since epoch
    # sole dedup key
    tx_digest  = Column(String, nullable=False, unique=True)

    __table_args__ = (
        Index("idx_swaps_pool_ts", "pool_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<Swap {self.tx_digest} pool={self.pool_id} in={self.amount_in} out={self.amount_out}>"

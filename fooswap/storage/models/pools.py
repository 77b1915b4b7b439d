# models/pools.py
from sqlalchemy import Column, String, BigInteger, Index
from fooswap.storage.base import Base
from fooswap.storage.types import Amount


class Pool(Base):
    __tablename__ = "pools"

    pool_id      = Column(String,          primary_key=True)               # Sui object id
    token_a      = Column(String,          nullable=False, default="")     # Move type, "" until known
    token_b      = Column(String,          nullable=False, default="")
    reserve_a    = Column(Amount(),        nullable=False, default=0)
    reserve_b    = Column(Amount(),        nullable=False, default=0)
    last_updated = Column(BigInteger,      nullable=False, default=0)      # ms of the last applied event

    __table_args__ = (
        Index("idx_pools_last_updated", "last_updated"),
    )

    def __repr__(self) -> str:         # for nicer logs
        return f"<Pool {self.pool_id} {self.token_a}/{self.token_b} {self.reserve_a}:{self.reserve_b}>"

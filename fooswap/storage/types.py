from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator


class Amount(TypeDecorator):
    """Exact on-chain amount (Move u64 and friends) as ``Decimal``.

    ``NUMERIC(38, 18)`` on PostgreSQL. SQLite would bind a Decimal through a
    float and lose integer digits past 2**53, so there the value is kept as
    its decimal string.
    """
    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(Numeric(38, 18))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return Decimal(str(value))

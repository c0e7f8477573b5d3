"""
Custom column types.
"""
from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class BaseUnitAmount(TypeDecorator):
    """
    Arbitrary-precision integer stored as text.

    Base-unit amounts (wei) overflow 64-bit integer columns, so they are kept
    as decimal digit strings in the database and handed back as Python ints.
    """
    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)

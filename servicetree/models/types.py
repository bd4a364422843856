"""Custom SQLAlchemy types and severity constants shared by the models."""
from sqlalchemy import BigInteger, TypeDecorator


# Status codes, in ladder order:
# 0:normal      3:average
# 1:information 4:major
# 2:alert       5:critical
SEVERITY_NAMES = ("normal", "information", "alert", "average", "major", "critical")


class ServiceId(TypeDecorator):
    """Numeric identifier exposed as an opaque string.

    Stored as BIGINT; ids are ``nodeid * 10**14 + counter`` on distributed
    setups, so they are kept as strings on the Python side.
    """
    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return int(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return str(value)

"""ID sequences of the distributed platform schema."""
from sqlalchemy import BigInteger, Column, Integer, String

from servicetree.database import Base


class IdSequence(Base):
    """Next free id of ``table_name.field_name`` for one distributed node.

    The distributed node id (0 to 999) is the partition prefix every id
    allocated from this row belongs to.
    """

    __tablename__ = "ids"

    nodeid = Column(Integer, primary_key=True, autoincrement=False)
    table_name = Column(String(64), primary_key=True)
    field_name = Column(String(64), primary_key=True)
    nextid = Column(BigInteger, nullable=False, default=0)

from sqlalchemy import Column, Integer, String, DateTime
from tinylink.database.connection import Base


class Link(Base):
    """
    Persisted link row.

    code is the primary key, so the database's unique index is what
    decides which of two concurrent creates wins.
    """
    __tablename__ = "links"

    code = Column(String(8), primary_key=True)
    url = Column(String, nullable=False)
    clicks = Column(Integer, nullable=False, default=0)
    last_clicked = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

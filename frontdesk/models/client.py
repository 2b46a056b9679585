"""Client model definitions."""

from sqlalchemy import Column, Integer, String
from frontdesk.database import Base


class Client(Base):
    """Represents a clinic client."""
    __tablename__ = "client"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)

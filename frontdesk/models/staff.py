"""Staff model definitions."""

from sqlalchemy import Column, Date, Integer, String
from frontdesk.database import Base


class Staff(Base):
    """Represents a clinic staff member; fired_date marks a soft delete."""
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    specialties = Column(String, nullable=False)
    fired_date = Column(Date, nullable=True)

"""Appointment model definitions."""

from datetime import datetime, timedelta

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Time
from frontdesk.database import Base


class Appointment(Base):
    """Represents a booked service; displaced appointments are soft deleted."""
    __tablename__ = "appointment"

    id = Column(Integer, primary_key=True)
    service = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    client_id = Column(Integer, ForeignKey("client.id"))
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    day = Column(Date)
    start_time = Column(Time)
    deleted = Column(Boolean, nullable=False, default=False)
    replaced_by = Column(Integer, ForeignKey("appointment.id"))  # set once rebooked

    @property
    def end_time(self):
        if self.day is None or self.start_time is None:
            return None
        return (datetime.combine(self.day, self.start_time) + timedelta(minutes=self.duration)).time()

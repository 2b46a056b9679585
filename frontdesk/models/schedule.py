"""Schedule model definitions."""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, Time
from frontdesk.database import Base


class Schedule(Base):
    """Represents one working window of a staff member on one day."""
    __tablename__ = "schedule"
    __table_args__ = (
        CheckConstraint("start_time <= stop_time", name="ck_schedule_window"),
    )

    id = Column(Integer, primary_key=True, index=True)
    day = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    stop_time = Column(Time, nullable=False)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)

    def __repr__(self) -> str:
        return (
            f"Schedule(id={self.id}, day={self.day}, start_time={self.start_time}, "
            f"stop_time={self.stop_time}, staff_id={self.staff_id})"
        )

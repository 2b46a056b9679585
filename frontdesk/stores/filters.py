"""Filter objects that compose named predicates over explicit columns.

Every filter field maps to exactly one predicate on one column and values are
always passed as bound parameters. An empty filter produces no predicates and
therefore selects every row.
"""

from datetime import date, time

from pydantic import BaseModel
from sqlalchemy import ColumnElement

from frontdesk.models.schedule import Schedule
from frontdesk.models.staff import Staff


class ScheduleFilter(BaseModel):
    id: int | None = None
    day: date | None = None
    start_time: time | None = None
    stop_time: time | None = None
    staff_id: int | None = None

    def predicates(self) -> dict[str, ColumnElement[bool]]:
        named: dict[str, ColumnElement[bool]] = {}

        if self.id is not None and self.id > 0:
            named['id'] = Schedule.id == self.id
        if self.day is not None:
            named['day'] = Schedule.day == self.day
        if self.start_time is not None:
            named['start_time'] = Schedule.start_time >= self.start_time
        if self.stop_time is not None:
            named['stop_time'] = Schedule.stop_time <= self.stop_time
        if self.staff_id is not None and self.staff_id > 0:
            named['staff_id'] = Schedule.staff_id == self.staff_id

        return named

    def conditions(self) -> list[ColumnElement[bool]]:
        return list(self.predicates().values())


class StaffFilter(BaseModel):
    id: int | None = None
    name: str | None = None
    surname: str | None = None
    specialties: str | None = None
    fired_date: date | None = None

    def predicates(self) -> dict[str, ColumnElement[bool]]:
        # Fired staff are only visible when filtering on the fired date itself.
        named: dict[str, ColumnElement[bool]] = {}

        if self.fired_date is not None:
            named['fired_date'] = Staff.fired_date == self.fired_date
        else:
            named['active'] = Staff.fired_date.is_(None)
        if self.id is not None and self.id > 0:
            named['id'] = Staff.id == self.id
        if self.name:
            named['name'] = Staff.name.contains(self.name, autoescape=True)
        if self.surname:
            named['surname'] = Staff.surname.contains(self.surname, autoescape=True)
        if self.specialties:
            named['specialties'] = Staff.specialties.contains(self.specialties, autoescape=True)

        return named

    def conditions(self) -> list[ColumnElement[bool]]:
        return list(self.predicates().values())

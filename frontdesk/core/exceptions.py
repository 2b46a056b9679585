"""Error taxonomy shared by the stores, the scheduling core and the routes."""


class FrontDeskError(Exception):
    """Base class for every error raised by the front-desk service."""


class InvalidRecordError(FrontDeskError, ValueError):
    """A record or argument is malformed; raised before touching the store."""


class StoreError(FrontDeskError):
    """The relational store could not complete an operation."""


class BusinessRuleError(FrontDeskError):
    """The request is well formed but conflicts with the stored data."""


class StaffNotFoundError(BusinessRuleError):
    def __init__(self, staff_id: int | None):
        super().__init__(f"Staff member {staff_id} does not exist.")
        self.staff_id = staff_id


class ScheduleNotFoundError(BusinessRuleError):
    def __init__(self, schedule_id: int | None):
        super().__init__(f"Schedule {schedule_id} does not exist.")
        self.schedule_id = schedule_id


class AppointmentNotFoundError(BusinessRuleError):
    def __init__(self, appointment_id: int | None):
        super().__init__(f"Appointment {appointment_id} does not exist.")
        self.appointment_id = appointment_id

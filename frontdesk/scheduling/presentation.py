from typing import Protocol

from frontdesk.models.appointment import Appointment
from frontdesk.models.schedule import Schedule
from frontdesk.scheduling.reschedule import Cancelled, Rescheduled, RescheduleCandidate, RescheduleOutcome, StoreFailure


class ReschedulePresenter(Protocol):
    def present_reschedule_options(
        self,
        schedules: list[Schedule],
        candidates: list[RescheduleCandidate | None],
        appointment: Appointment,
    ) -> None:
        ...

    def present_cancellation_notice(self, appointment: Appointment) -> None:
        ...


def present_outcome(outcome: RescheduleOutcome, presenter: ReschedulePresenter) -> None:
    if isinstance(outcome, Rescheduled):
        presenter.present_reschedule_options(outcome.schedules, outcome.candidates, outcome.appointment)
    elif isinstance(outcome, Cancelled):
        presenter.present_cancellation_notice(outcome.appointment)
    elif isinstance(outcome, StoreFailure):
        raise outcome.error
    else:
        raise TypeError(f'Unknown reschedule outcome: {outcome!r}')

from datetime import UTC, date, datetime, time

import pytest

from sanad.appointment import APPOINTMENT_KIND, Appointment, AppointmentStatus
from sanad.core.exceptions import StateError


@pytest.mark.unit
class TestAppointmentLifecycle:
    def test_pending_to_confirmed_to_completed(self):
        Appointment.check_transition(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
        Appointment.check_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED)

    def test_cannot_complete_unconfirmed(self):
        with pytest.raises(StateError):
            Appointment.check_transition(AppointmentStatus.PENDING, AppointmentStatus.COMPLETED)

    def test_cancelled_is_terminal(self):
        with pytest.raises(StateError, match="terminal"):
            Appointment.check_transition(AppointmentStatus.CANCELLED, AppointmentStatus.PENDING)

    def test_initial_status(self):
        assert APPOINTMENT_KIND.initial_status == AppointmentStatus.PENDING


@pytest.mark.unit
def test_wire_format_uses_iso_date_and_time():
    appointment = Appointment(
        id="appointment-1",
        title="Checkup",
        date=date(2026, 11, 2),
        time=time(9, 30),
        ride_id="ride-7",
        created_at=datetime(2026, 10, 19, tzinfo=UTC),
    )

    wire = appointment.to_wire()

    assert wire["date"] == "2026-11-02"
    assert wire["time"] == "09:30:00"
    assert wire["rideId"] == "ride-7"
    assert wire["status"] == "pending"


@pytest.mark.unit
def test_appointments_update_with_put_on_item_path():
    assert APPOINTMENT_KIND.update_method == "PUT"
    assert APPOINTMENT_KIND.transition_path("a1") == "/appointments/a1"

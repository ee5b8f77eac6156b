import logging
from datetime import timedelta

import pytest

from agendamentos.availability import day_of_week
from agendamentos.exceptions import BookingConflict, InvalidTransition
from agendamentos.models import Appointment, Availability
from agendamentos.store import AgendaStore, get_store

from .utils import at

pytestmark = pytest.mark.django_db


@pytest.fixture
def store():
    return AgendaStore()


def test_app_config_owns_a_store():
    assert isinstance(get_store(), AgendaStore)
    assert get_store() is get_store()


def test_busy_intervals_skip_cancelled_and_rejected(store, professional, booking_day, make_appointment):
    confirmed = make_appointment(at(booking_day, 9))
    waiting = make_appointment(at(booking_day, 10), status=Appointment.WAITING_PAYMENT)
    make_appointment(at(booking_day, 11), status=Appointment.CANCELLED)
    make_appointment(at(booking_day, 12), status=Appointment.REJECTED)

    busy = store.busy_intervals(professional.pk, booking_day)

    assert sorted(busy) == [
        (confirmed.start_time, confirmed.end_time),
        (waiting.start_time, waiting.end_time),
    ]


def test_busy_intervals_only_for_that_professional_and_day(store, professional, other_professional,
                                                           booking_day, make_appointment):
    make_appointment(at(booking_day, 9), prof=other_professional)
    make_appointment(at(booking_day + timedelta(days=1), 9))
    assert store.busy_intervals(professional.pk, booking_day) == []


def test_busy_intervals_include_booking_crossing_midnight(store, professional, booking_day, make_appointment):
    previous = booking_day - timedelta(days=1)
    late = make_appointment(at(previous, 23, 30))
    assert store.busy_intervals(professional.pk, booking_day) == [(late.start_time, late.end_time)]


def test_overlapping_uses_half_open_rule(store, professional, booking_day, make_appointment):
    appointment = make_appointment(at(booking_day, 10))
    assert store.overlapping(professional.pk, at(booking_day, 10, 30), at(booking_day, 11, 30)) == [appointment.pk]
    assert store.overlapping(professional.pk, at(booking_day, 11), at(booking_day, 12)) == []


def test_available_slots_reads_template_and_bookings(store, professional, service, availability,
                                                     booking_day, make_appointment):
    make_appointment(at(booking_day, 10))
    assert store.available_slots(professional, service, booking_day) == ['09:00', '11:00']


def test_available_slots_without_template(store, professional, service, booking_day):
    assert store.available_slots(professional, service, booking_day) == []


def test_book_creates_waiting_payment_with_derived_end(store, professional, service, booking_day):
    appointment = store.book(professional, service, at(booking_day, 9), 'Maria Silva', '11999999999')
    appointment.refresh_from_db()
    assert appointment.status == Appointment.WAITING_PAYMENT
    assert appointment.end_time == at(booking_day, 10)


def test_book_rejects_taken_slot(store, professional, service, booking_day, make_appointment):
    make_appointment(at(booking_day, 10, 30), status=Appointment.PENDING)
    with pytest.raises(BookingConflict):
        store.book(professional, service, at(booking_day, 10), 'Maria Silva', '11999999999')
    assert Appointment.objects.count() == 1


def test_book_allowed_over_cancelled_booking(store, professional, service, booking_day, make_appointment):
    make_appointment(at(booking_day, 10), status=Appointment.CANCELLED)
    appointment = store.book(professional, service, at(booking_day, 10), 'Maria Silva', '11999999999')
    assert appointment.pk is not None


def test_update_status_confirms_waiting_payment(store, booking_day, make_appointment):
    appointment = make_appointment(at(booking_day, 9), status=Appointment.WAITING_PAYMENT)
    store.update_status(appointment.pk, Appointment.CONFIRMED)
    assert Appointment.objects.get(pk=appointment.pk).status == Appointment.CONFIRMED


def test_update_status_refuses_confirmed_to_pending(store, booking_day, make_appointment):
    appointment = make_appointment(at(booking_day, 9), status=Appointment.CONFIRMED)
    with pytest.raises(InvalidTransition):
        store.update_status(appointment.pk, Appointment.PENDING)
    assert Appointment.objects.get(pk=appointment.pk).status == Appointment.CONFIRMED


def test_update_status_logs_who_changed_it(store, booking_day, make_appointment, caplog, monkeypatch):
    # o logger da app não propaga para a raiz fora dos testes
    monkeypatch.setattr(logging.getLogger('agendamentos'), 'propagate', True)
    appointment = make_appointment(at(booking_day, 9), status=Appointment.PENDING)
    with caplog.at_level(logging.INFO, logger='agendamentos'):
        store.update_status(appointment.pk, Appointment.REJECTED, actor=7)
    assert f'Agendamento {appointment.pk}: pending -> rejected (por 7)' in caplog.text


def test_update_status_missing_appointment(store):
    with pytest.raises(Appointment.DoesNotExist):
        store.update_status(999, Appointment.CONFIRMED)


def test_save_schedule_upserts_per_day(store, professional):
    store.save_schedule(professional.pk, [
        {'day_of_week': 1, 'time_slots': ['10:00', '09:00'], 'is_available': True},
        {'day_of_week': 2, 'time_slots': [], 'is_available': False},
    ])
    store.save_schedule(professional.pk, [
        {'day_of_week': 1, 'time_slots': ['14:00'], 'is_available': True},
    ])

    rows = Availability.objects.filter(professional=professional)
    assert rows.count() == 2
    assert rows.get(day_of_week=1).time_slots == ['14:00']


def test_schedule_for_fills_missing_days(store, professional, availability, booking_day):
    days = store.schedule_for(professional.pk)
    assert [d['day_of_week'] for d in days] == list(range(7))
    filled = days[day_of_week(booking_day)]
    assert filled == {'day_of_week': day_of_week(booking_day),
                      'time_slots': ['09:00', '10:00', '11:00'], 'is_available': True}
    closed = [d for d in days if d['day_of_week'] != day_of_week(booking_day)]
    assert all(d == {'day_of_week': d['day_of_week'], 'time_slots': [], 'is_available': False} for d in closed)


def test_set_service_professionals_replaces_links(store, service, professional, other_professional):
    store.set_service_professionals(service, [other_professional.pk])
    assert list(service.professionals.all()) == [other_professional]
    store.set_service_professionals(service, [])
    assert service.professionals.count() == 0

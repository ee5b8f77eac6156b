from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from agendamentos.exceptions import InvalidTransition
from agendamentos.models import Appointment, Availability, Professional, validate_time_slots

from .utils import at


@pytest.mark.django_db
def test_end_time_follows_service_duration(service, booking_day, make_appointment):
    appointment = make_appointment(at(booking_day, 9))
    assert appointment.end_time == at(booking_day, 10)

    appointment.start_time = at(booking_day, 14)
    appointment.save(update_fields=['start_time'])
    appointment.refresh_from_db()
    assert appointment.end_time == at(booking_day, 15)


@pytest.mark.django_db
def test_end_time_cannot_be_set_independently(booking_day, make_appointment):
    appointment = make_appointment(at(booking_day, 9))
    appointment.end_time = appointment.start_time + timedelta(hours=5)
    appointment.save()
    appointment.refresh_from_db()
    assert appointment.end_time == at(booking_day, 10)


@pytest.mark.django_db
def test_one_availability_per_professional_and_day(professional):
    Availability.objects.create(professional=professional, day_of_week=1, time_slots=['09:00'])
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Availability.objects.create(professional=professional, day_of_week=1, time_slots=['10:00'])


@pytest.mark.django_db
def test_time_slots_are_stored_sorted(professional):
    availability = Availability.objects.create(
        professional=professional, day_of_week=3, time_slots=['15:00', '08:00', '15:00'])
    availability.refresh_from_db()
    assert availability.time_slots == ['08:00', '15:00']


@pytest.mark.parametrize('slots', [['9:00'], ['24:00'], ['10:60'], ['10h00'], 'dez horas', [900]])
def test_invalid_time_slots_rejected(slots):
    with pytest.raises(ValidationError):
        validate_time_slots(slots)


def test_valid_time_slots_accepted():
    validate_time_slots(['00:00', '09:30', '23:59'])


@pytest.mark.parametrize('current, target', [
    (Appointment.WAITING_PAYMENT, Appointment.PENDING),
    (Appointment.WAITING_PAYMENT, Appointment.CONFIRMED),
    (Appointment.WAITING_PAYMENT, Appointment.REJECTED),
    (Appointment.PENDING, Appointment.CONFIRMED),
    (Appointment.PENDING, Appointment.REJECTED),
    (Appointment.CONFIRMED, Appointment.CANCELLED),
])
def test_supported_transitions(current, target):
    appointment = Appointment(status=current)
    appointment.transition_to(target)
    assert appointment.status == target


@pytest.mark.parametrize('current, target', [
    (Appointment.CONFIRMED, Appointment.PENDING),
    (Appointment.PENDING, Appointment.WAITING_PAYMENT),
    (Appointment.PENDING, Appointment.CANCELLED),
    (Appointment.REJECTED, Appointment.CONFIRMED),
    (Appointment.CANCELLED, Appointment.CONFIRMED),
    (Appointment.CANCELLED, Appointment.PENDING),
])
def test_unsupported_transitions(current, target):
    appointment = Appointment(status=current)
    assert not appointment.can_transition(target)
    with pytest.raises(InvalidTransition):
        appointment.transition_to(target)
    assert appointment.status == current


def test_rejected_and_cancelled_are_terminal():
    assert Appointment.TRANSITIONS[Appointment.REJECTED] == ()
    assert Appointment.TRANSITIONS[Appointment.CANCELLED] == ()
    assert not Appointment(status=Appointment.CANCELLED).is_active
    assert Appointment(status=Appointment.WAITING_PAYMENT).is_active


@pytest.mark.django_db
def test_password_is_hashed(professional):
    assert professional.password != 'segredo123'
    assert professional.check_password('segredo123')
    assert not professional.check_password('errada')


@pytest.mark.django_db
def test_plaintext_secret_never_matches():
    professional = Professional.objects.create(name='Legado', email='legado@aura.com', password='123456')
    assert not professional.check_password('123456')

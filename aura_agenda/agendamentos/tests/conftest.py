from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from agendamentos.availability import day_of_week
from agendamentos.models import Appointment, Availability, Professional, Service


@pytest.fixture(autouse=True)
def fast_hashers(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


def make_professional(name, email, password='segredo123', is_admin=False):
    professional = Professional(name=name, email=email, role='Cabeleireira', is_admin=is_admin)
    professional.set_password(password)
    professional.save()
    return professional


@pytest.fixture
def professional(db):
    return make_professional('Alice Silva', 'alice@aura.com')


@pytest.fixture
def other_professional(db):
    return make_professional('Bruno Santos', 'bruno@aura.com')


@pytest.fixture
def admin_professional(db):
    return make_professional('Administrador', 'admin@aura.com', password='admin-forte', is_admin=True)


@pytest.fixture
def service(db, professional):
    service = Service.objects.create(
        name='Corte Premium',
        description='Lavagem, corte e finalização',
        duration_minutes=60,
        price=Decimal('80.00'),
        pix_key='pix@aura.com',
        category='Cabelo',
    )
    service.professionals.add(professional)
    return service


@pytest.fixture
def booking_day():
    return timezone.localdate() + timedelta(days=1)


@pytest.fixture
def availability(professional, booking_day):
    return Availability.objects.create(
        professional=professional,
        day_of_week=day_of_week(booking_day),
        time_slots=['11:00', '09:00', '10:00'],
        is_available=True,
    )


@pytest.fixture
def make_appointment(service, professional):
    def factory(start, status=Appointment.CONFIRMED, prof=None, svc=None):
        return Appointment.objects.create(
            service=svc or service,
            professional=prof or professional,
            customer_name='Maria Silva',
            customer_phone='(11) 99999-9999',
            start_time=start,
            status=status,
        )
    return factory

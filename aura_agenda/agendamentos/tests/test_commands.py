from io import StringIO

import pytest
from django.core.management import call_command

from agendamentos.auth import authenticate
from agendamentos.models import Availability, Professional, Service

pytestmark = pytest.mark.django_db


def seed(**options):
    out = StringIO()
    call_command('seed_agenda', stdout=out, **options)
    return out.getvalue()


def test_seed_creates_demo_data():
    output = seed(password='senha-demo')
    assert 'Dados de demonstração prontos.' in output

    assert Service.objects.count() == 3
    assert Professional.objects.count() == 4
    assert Professional.objects.get(email='admin@aura.com').is_admin
    alice = Professional.objects.get(email='alice@aura.com')
    assert list(alice.services.values_list('name', flat=True)) == ['Corte Premium']
    # segunda a sexta
    assert sorted(alice.availabilities.values_list('day_of_week', flat=True)) == [1, 2, 3, 4, 5]
    assert not Availability.objects.filter(professional__is_admin=True).exists()
    monday = alice.availabilities.get(day_of_week=1)
    # pausa para o almoço ao meio-dia, último atendimento termina às 17:00
    assert monday.time_slots == ['09:00', '10:00', '11:00', '13:00', '14:00', '15:00', '16:00']


def test_seed_is_idempotent():
    seed()
    seed()
    assert Service.objects.count() == 3
    assert Professional.objects.count() == 4
    assert Availability.objects.count() == 15


def test_seeded_admin_can_log_in():
    seed(password='senha-demo')
    assert authenticate('admin@aura.com', 'senha-demo') is not None
    assert authenticate('admin@aura.com', 'admin') is None

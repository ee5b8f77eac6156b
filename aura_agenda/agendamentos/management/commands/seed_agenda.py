from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from agendamentos.models import Professional, Service
from agendamentos.store import get_store

SERVICES = [
    ('Corte Premium', 'Lavagem, corte e finalização', 'Cabelo', Decimal('80.00')),
    ('Manicure em Gel', 'Esmaltação de longa duração', 'Unhas', Decimal('120.00')),
    ('Massagem Relaxante', 'Alívio de stress e dores musculares', 'Massagem', Decimal('150.00')),
]

# nome, cargo, bio, e-mail, admin, serviço vinculado
PROFESSIONALS = [
    ('Administrador', 'Gerente', 'Gerente do sistema', 'admin@aura.com', True, None),
    ('Alice Silva', 'Cabeleireira', 'Especialista em cortes modernos.', 'alice@aura.com', False, 'Corte Premium'),
    ('Bruno Santos', 'Massoterapeuta', 'Massagem terapêutica certificada.', 'bruno@aura.com', False, 'Massagem Relaxante'),
    ('Carla Dias', 'Manicure', 'Nail designer premiada.', 'carla@aura.com', False, 'Manicure em Gel'),
]

WEEKDAY_SLOTS = ['09:00', '10:00', '11:00', '13:00', '14:00', '15:00', '16:00']


class Command(BaseCommand):
    help = 'Cria serviços, profissionais e agendas de demonstração (idempotente).'

    def add_arguments(self, parser):
        parser.add_argument('--password', default='troque-esta-senha',
                            help='Senha inicial de todos os profissionais criados.')
        parser.add_argument('--pix-key', default='pix@aura.com')

    @transaction.atomic
    def handle(self, *args, **options):
        store = get_store()
        services = {}
        for name, description, category, price in SERVICES:
            service, created = Service.objects.get_or_create(
                name=name,
                defaults={
                    'description': description,
                    'category': category,
                    'price': price,
                    'duration_minutes': 60,
                    'pix_key': options['pix_key'],
                },
            )
            services[name] = service
            if created:
                self.stdout.write(f"Serviço criado: {name}")

        for name, role, bio, email, is_admin, service_name in PROFESSIONALS:
            professional = Professional.objects.filter(email=email).first()
            if professional is None:
                professional = Professional(name=name, role=role, bio=bio, email=email, is_admin=is_admin)
                professional.set_password(options['password'])
                professional.save()
                self.stdout.write(f"Profissional criado: {name} <{email}>")
            if service_name:
                services[service_name].professionals.add(professional)
            if not is_admin and not professional.availabilities.exists():
                # segunda a sexta
                store.save_schedule(professional.pk, [
                    {'day_of_week': dow, 'time_slots': WEEKDAY_SLOTS, 'is_available': True}
                    for dow in range(1, 6)
                ])

        self.stdout.write(self.style.SUCCESS('Dados de demonstração prontos.'))

"""
Acesso aos dados da agenda.

AgendaStore concentra as consultas que o fluxo de agendamento e o painel
fazem no banco. Uma instância é criada em AgendamentosConfig.ready() e
obtida com get_store(); testes podem construir a sua.
"""
import logging
from datetime import timedelta

from django.apps import apps
from django.db import transaction

from .availability import check_conflict, compute_slots, day_bounds, day_of_week, make_aware_if_naive
from .exceptions import BookingConflict
from .models import Appointment, Availability, Professional

logger = logging.getLogger(__name__)


def get_store():
    return apps.get_app_config('agendamentos').store


class AgendaStore:

    def active_appointments(self, professional_id):
        return Appointment.objects.filter(professional_id=professional_id).exclude(
            status__in=Appointment.INACTIVE_STATUSES
        )

    def availability_for(self, professional_id):
        return list(Availability.objects.filter(professional_id=professional_id))

    def template_for(self, professional_id, day):
        return Availability.objects.filter(
            professional_id=professional_id, day_of_week=day_of_week(day)
        ).first()

    def busy_intervals(self, professional_id, day):
        day_start, day_end = day_bounds(day)
        # qualquer agendamento que encoste no dia, inclusive os que viram a meia-noite
        qs = self.active_appointments(professional_id).filter(
            start_time__lte=day_end, end_time__gt=day_start
        )
        return list(qs.values_list('start_time', 'end_time'))

    def overlapping(self, professional_id, start, end):
        return list(
            self.active_appointments(professional_id)
            .filter(start_time__lt=end, end_time__gt=start)
            .values_list('id', flat=True)
        )

    def available_slots(self, professional, service, day):
        template = self.template_for(professional.pk, day)
        existing = self.busy_intervals(professional.pk, day)
        return compute_slots(template, existing, day, service.duration_minutes)

    def book(self, professional, service, start, customer_name, customer_phone,
             status=Appointment.WAITING_PAYMENT, notes=''):
        start = make_aware_if_naive(start)
        end = start + timedelta(minutes=service.duration_minutes)
        with transaction.atomic():
            # trava a linha do profissional: reservas concorrentes para ele esperam aqui
            Professional.objects.select_for_update().filter(pk=professional.pk).first()
            if check_conflict(professional.pk, start, end, self):
                logger.info(
                    "Conflito de horário: profissional=%s inicio=%s", professional.pk, start.isoformat()
                )
                raise BookingConflict()
            appointment = Appointment.objects.create(
                professional=professional,
                service=service,
                customer_name=customer_name,
                customer_phone=customer_phone,
                start_time=start,
                status=status,
                notes=notes,
            )
        logger.info(
            "Agendamento %s criado: profissional=%s servico=%s inicio=%s status=%s",
            appointment.pk, professional.pk, service.pk, start.isoformat(), status,
        )
        return appointment

    def update_status(self, appointment_id, status, actor=None):
        """actor: quem mudou o status (id do profissional, 'admin' ou None para o cliente)."""
        with transaction.atomic():
            appointment = Appointment.objects.select_for_update().get(pk=appointment_id)
            previous = appointment.status
            appointment.transition_to(status)
            appointment.save(update_fields=['status'])
        logger.info(
            "Agendamento %s: %s -> %s (por %s)", appointment_id, previous, status, actor or 'cliente'
        )
        return appointment

    def schedule_for(self, professional_id):
        """Os sete dias da semana, preenchendo com dia fechado o que não existe."""
        existing = {a.day_of_week: a for a in self.availability_for(professional_id)}
        days = []
        for dow in range(7):
            row = existing.get(dow)
            if row is None:
                days.append({'day_of_week': dow, 'time_slots': [], 'is_available': False})
            else:
                days.append({
                    'day_of_week': dow,
                    'time_slots': list(row.time_slots),
                    'is_available': row.is_available,
                })
        return days

    def save_schedule(self, professional_id, days):
        """Upsert por (profissional, dia da semana)."""
        saved = []
        with transaction.atomic():
            for day in days:
                availability, _ = Availability.objects.update_or_create(
                    professional_id=professional_id,
                    day_of_week=day['day_of_week'],
                    defaults={
                        'time_slots': day['time_slots'],
                        'is_available': day['is_available'],
                    },
                )
                saved.append(availability)
        logger.info("Agenda do profissional %s salva (%d dias)", professional_id, len(saved))
        return saved

    def set_service_professionals(self, service, professional_ids):
        # substitui todos os vínculos: apaga e insere de novo
        with transaction.atomic():
            service.professionals.clear()
            if professional_ids:
                service.professionals.add(*professional_ids)

# agendamentos/availability.py
from datetime import datetime, time, timedelta

from django.utils import timezone


def make_aware_if_naive(dt):
    """
    Recebe um datetime e retorna um aware datetime usando timezone.get_current_timezone()
    se o datetime for naive. Se já for aware, retorna como está.
    """
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def day_of_week(day):
    """Dia da semana no padrão da agenda: 0=domingo ... 6=sábado."""
    return (day.weekday() + 1) % 7


def parse_slot(slot):
    hours, minutes = slot.split(':')
    return time(int(hours), int(minutes))


def day_bounds(day):
    """Janela [00:00, 23:59:59.999999] do dia, em horário local."""
    start = make_aware_if_naive(datetime.combine(day, time.min))
    end = make_aware_if_naive(datetime.combine(day, time.max))
    return start, end


def overlaps(start_a, end_a, start_b, end_b):
    # intervalos semiabertos: encostar na borda não é conflito
    return start_a < end_b and end_a > start_b


def compute_slots(template, existing_intervals, day, duration_minutes):
    """
    Horários de início livres para o dia.

    template: Availability do dia da semana de `day` (ou None).
    existing_intervals: pares (início, fim) já ocupados naquele dia.
    Retorna os "HH:MM" do template que não colidem com nenhum intervalo,
    em ordem crescente.
    """
    if template is None or not template.is_available or not template.time_slots:
        return []

    duration = timedelta(minutes=duration_minutes)
    busy = [(make_aware_if_naive(s), make_aware_if_naive(e)) for s, e in existing_intervals]

    free = []
    for slot in sorted(set(template.time_slots)):
        start = make_aware_if_naive(datetime.combine(day, parse_slot(slot)))
        end = start + duration
        if any(overlaps(start, end, b_start, b_end) for b_start, b_end in busy):
            continue
        free.append(slot)
    return free


def check_conflict(professional_id, start, end, source):
    """
    Revalida o horário imediatamente antes de gravar o agendamento.

    `source` é quem responde pelos agendamentos gravados (AgendaStore em
    produção) e expõe overlapping(professional_id, start, end).
    Retorna True quando o horário está ocupado.
    """
    start = make_aware_if_naive(start)
    end = make_aware_if_naive(end)
    return bool(list(source.overlapping(professional_id, start, end)))

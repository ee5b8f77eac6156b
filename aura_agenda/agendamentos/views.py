# agendamentos/views.py
import json
import logging
from datetime import date, datetime, timedelta

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import Http404, HttpResponse, HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404, render
from django.template.loader import render_to_string
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from . import wizard as steps
from .availability import day_of_week, make_aware_if_naive, parse_slot
from .exceptions import AgendaError, BookingConflict, InvalidTransition
from .forms import CustomerDetailsForm, DayChoiceForm, SlotChoiceForm, SlotsQueryForm
from .models import DAYS_OF_WEEK, Appointment, Availability, Professional, Service
from .pix import payment_info
from .serializers import serialize_appointment, serialize_professional, serialize_service
from .store import get_store
from .wizard import BookingWizard

logger = logging.getLogger(__name__)

GENERIC_ERRORS = {
    'submit_details': 'Falha ao iniciar agendamento. Por favor, tente novamente.',
    'confirm_payment': 'Erro ao confirmar. Tente novamente ou entre em contato pelo WhatsApp.',
}
DEFAULT_ERROR = 'Erro ao processar sua solicitação. Tente novamente.'


def error_response(message, status, **extra):
    payload = {'status': 'error', 'message': message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def parse_payload(request):
    """Aceita JSON ou formulário. Retorna None se o JSON vier quebrado."""
    if request.content_type == 'application/json':
        try:
            payload = json.loads(request.body or b'{}')
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None
    return request.POST.dict()


def get_id(payload, key):
    try:
        return int(payload.get(key))
    except (TypeError, ValueError):
        raise Http404(f'{key} inválido')


def booking_days():
    today = timezone.localdate()
    return [today + timedelta(days=i) for i in range(settings.AURA_BOOKING_DAYS)]


@ensure_csrf_cookie
def index(request):
    services = Service.objects.all()
    days_info = []
    for d in booking_days():
        days_info.append({'date': d, 'iso': d.isoformat(), 'label': DAYS_OF_WEEK[day_of_week(d)][:3]})
    return render(request, 'agendamentos/index.html', {
        'services': services,
        'days_info': days_info,
    })


@require_GET
def professionals_for_service(request, service_id):
    service = get_object_or_404(Service, pk=service_id)
    return JsonResponse({
        'status': 'ok',
        'service': serialize_service(service),
        'professionals': [serialize_professional(p) for p in service.professionals.all()],
    })


@require_GET
def slots_for_day(request):
    """
    Endpoint que retorna o partial HTML com os horários livres daquele dia
    para um serviço e profissional.
    """
    form = SlotsQueryForm(request.GET)
    if not form.is_valid():
        return HttpResponseBadRequest('Parâmetros faltando ou inválidos')

    service = get_object_or_404(Service, pk=form.cleaned_data['service_id'])
    prof = get_object_or_404(Professional, pk=form.cleaned_data['professional_id'])
    day = form.cleaned_data['day']

    try:
        slots = get_store().available_slots(prof, service, day)
    except DatabaseError:
        logger.exception("Erro ao obter horários: profissional=%s dia=%s", prof.pk, day)
        return HttpResponse("Erro interno ao obter horários.", status=500)

    # só vale como marca de atualidade se for a mesma seleção do fluxo
    wizard = BookingWizard.from_session(request.session)
    current = (wizard.service_id, wizard.professional_id, wizard.day) == (service.pk, prof.pk, day.isoformat())
    generation = wizard.generation if current else None
    html = render_to_string('agendamentos/partials/slots.html', {
        'slots': slots,
        'day': day,
        'service': service,
        'professional': prof,
        'generation': generation,
    }, request=request)
    response = HttpResponse(html)
    if generation is not None:
        response['X-Slots-Generation'] = str(generation)
    return response


# ----- fluxo de agendamento do cliente -----

def wizard_payload(wizard, **extra):
    data = wizard.to_dict()
    data['allowed_events'] = wizard.allowed_events()
    if wizard.state in (steps.PAYMENT, steps.CONFIRMATION) and wizard.appointment_id:
        appointment = Appointment.objects.select_related('service', 'professional').filter(
            pk=wizard.appointment_id).first()
        if appointment is not None:
            data['appointment'] = serialize_appointment(appointment)
            data['payment'] = payment_info(appointment.service)
    data.update(extra)
    return data


def ok(wizard, **extra):
    return JsonResponse({'status': 'ok', 'wizard': wizard_payload(wizard, **extra)})


def wizard_day(wizard):
    return date.fromisoformat(wizard.day)


def wizard_selection(wizard):
    service = get_object_or_404(Service, pk=wizard.service_id)
    prof = get_object_or_404(Professional, pk=wizard.professional_id)
    return service, prof


def handle_choose_service(request, wizard, payload):
    service = get_object_or_404(Service, pk=get_id(payload, 'service_id'))
    wizard.choose_service(service.pk)
    return ok(wizard, professionals=[serialize_professional(p) for p in service.professionals.all()])


def handle_choose_professional(request, wizard, payload):
    # só profissionais vinculados ao serviço escolhido
    prof = get_object_or_404(Professional, pk=get_id(payload, 'professional_id'), services__pk=wizard.service_id)
    wizard.choose_professional(prof.pk)
    return ok(wizard)


def handle_choose_date(request, wizard, payload):
    form = DayChoiceForm(payload)
    if not form.is_valid():
        return error_response('Data inválida.', 400, errors=form.errors.get_json_data())
    day = form.cleaned_data['day']
    if day not in booking_days():
        return error_response('Data fora do período de agendamento.', 400)
    wizard.choose_date(day.isoformat())
    service, prof = wizard_selection(wizard)
    return ok(wizard, slots=get_store().available_slots(prof, service, day))


def handle_choose_slot(request, wizard, payload):
    form = SlotChoiceForm(payload)
    if not form.is_valid():
        return error_response('Horário inválido.', 400, errors=form.errors.get_json_data())
    if not wizard.day:
        raise InvalidTransition('Escolha um dia antes do horário.')
    service, prof = wizard_selection(wizard)
    slots = get_store().available_slots(prof, service, wizard_day(wizard))
    wizard.choose_slot(form.cleaned_data['slot'], form.cleaned_data['generation'])
    if wizard.slot not in slots:
        wizard.slot = None
        return error_response('Este horário não está disponível.', 409,
                              slots=slots, wizard=wizard_payload(wizard))
    return ok(wizard)


def handle_proceed(request, wizard, payload):
    wizard.proceed()
    return ok(wizard)


def handle_submit_details(request, wizard, payload):
    form = CustomerDetailsForm(payload)
    if not form.is_valid():
        return error_response('Preencha nome e telefone.', 400, errors=form.errors.get_json_data())

    service, prof = wizard_selection(wizard)
    day = wizard_day(wizard)
    start = make_aware_if_naive(datetime.combine(day, parse_slot(wizard.slot)))
    store = get_store()
    try:
        appointment = store.book(
            prof, service, start,
            customer_name=form.cleaned_data['client_name'],
            customer_phone=form.cleaned_data['client_phone'],
        )
    except BookingConflict as exc:
        wizard.slot_taken()
        slots = store.available_slots(prof, service, day)
        return error_response(exc.message, exc.status_code, slots=slots, wizard=wizard_payload(wizard))

    wizard.submit_details(appointment.customer_name, appointment.customer_phone, appointment.pk)
    return ok(wizard)


def handle_confirm_payment(request, wizard, payload):
    # o cliente avisa que pagou o sinal; a equipe confere o Pix depois
    try:
        get_store().update_status(wizard.appointment_id, Appointment.PENDING)
    except Appointment.DoesNotExist:
        raise Http404('Agendamento não encontrado')
    except InvalidTransition:
        appointment = Appointment.objects.get(pk=wizard.appointment_id)
        if not appointment.is_active:
            wizard.restart()
            return error_response(
                'Este agendamento foi recusado ou cancelado pela equipe. Faça um novo agendamento.',
                409, wizard=wizard_payload(wizard),
            )
        # a equipe já recebeu o aviso ou confirmou antes do cliente
    wizard.confirm_payment()
    return ok(wizard)


def handle_back(request, wizard, payload):
    wizard.back()
    return ok(wizard)


def handle_restart(request, wizard, payload):
    wizard.restart()
    return ok(wizard)


WIZARD_HANDLERS = {
    'choose_service': handle_choose_service,
    'choose_professional': handle_choose_professional,
    'choose_date': handle_choose_date,
    'choose_slot': handle_choose_slot,
    'proceed': handle_proceed,
    'submit_details': handle_submit_details,
    'confirm_payment': handle_confirm_payment,
    'back': handle_back,
    'restart': handle_restart,
}


@require_GET
def wizard_state(request):
    wizard = BookingWizard.from_session(request.session)
    return JsonResponse({'status': 'ok', 'wizard': wizard_payload(wizard)})


@require_POST
def wizard_event(request, event):
    handler = WIZARD_HANDLERS.get(event)
    if handler is None:
        return error_response('Evento desconhecido.', 404)
    payload = parse_payload(request)
    if payload is None:
        return error_response('Dados inválidos.', 400)

    wizard = BookingWizard.from_session(request.session)
    try:
        if event not in wizard.allowed_events():
            raise InvalidTransition(f"Evento '{event}' não é válido no passo '{wizard.state}'.")
        response = handler(request, wizard, payload)
    except AgendaError as exc:
        return error_response(exc.message, exc.status_code, wizard=wizard_payload(wizard))
    except DatabaseError:
        logger.exception("Erro no agendamento (evento=%s)", event)
        return error_response(GENERIC_ERRORS.get(event, DEFAULT_ERROR), 500)

    wizard.save(request.session)
    return response


# tabelas exigidas pela aplicação
REQUIRED_MODELS = (Service, Professional, Availability, Appointment, Service.professionals.through)


@require_GET
def health(request):
    try:
        tables = set(connection.introspection.table_names())
    except DatabaseError:
        logger.exception("Banco de dados indisponível")
        return JsonResponse({'status': 'error', 'database': False}, status=503)
    missing = [m._meta.db_table for m in REQUIRED_MODELS if m._meta.db_table not in tables]
    if missing:
        logger.warning("Tabelas ausentes: %s", ', '.join(missing))
        return JsonResponse({'status': 'error', 'database': True, 'missing_tables': missing}, status=503)
    return JsonResponse({'status': 'ok', 'database': True})

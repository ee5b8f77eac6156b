"""
Painel da equipe: agendamentos, serviços, profissionais e agendas.

Administradores veem e editam tudo; os demais profissionais veem só os
próprios agendamentos, os serviços a que estão vinculados e a própria agenda.
"""
import logging
from functools import wraps

from django.conf import settings
from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import auth, views
from .exceptions import AgendaError
from .forms import LoginForm, ProfessionalForm, ServiceForm, StatusForm, clean_schedule
from .models import Appointment, Professional, Service
from .serializers import serialize_appointment, serialize_professional, serialize_service
from .store import get_store
from .views import error_response

logger = logging.getLogger(__name__)


def parse_payload(request):
    data = views.parse_payload(request)
    if data is None or request.content_type == 'application/json':
        return data
    # campos de múltipla escolha chegam repetidos no formulário
    if 'professionals' in request.POST:
        data['professionals'] = request.POST.getlist('professionals')
    return data


def forbidden():
    return error_response('Acesso restrito ao administrador.', 403)


def database_errors(view):
    """Falha do banco vira JSON 500 com mensagem genérica, registrada no log."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except DatabaseError:
            logger.exception("Erro de banco no painel (%s)", view.__name__)
            return error_response(views.DEFAULT_ERROR, 500)
    return wrapper


@require_POST
@database_errors
def login_view(request):
    payload = parse_payload(request)
    form = LoginForm(payload or {})
    if not form.is_valid():
        return error_response('Informe e-mail e senha.', 400, errors=form.errors.get_json_data())
    professional = auth.authenticate(form.cleaned_data['email'], form.cleaned_data['password'])
    if professional is None:
        return error_response('Credenciais inválidas.', 401)
    auth.login(request, professional)
    return JsonResponse({'status': 'ok', 'professional': serialize_professional(professional)})


@require_POST
@database_errors
def logout_view(request):
    auth.logout(request)
    return JsonResponse({'status': 'ok'})


# ----- agendamentos -----

def visible_appointments(professional):
    qs = Appointment.objects.select_related('service', 'professional').order_by('start_time')
    if not professional.is_admin:
        qs = qs.filter(professional=professional)
    return qs


@require_GET
@database_errors
@auth.professional_required
def appointments(request):
    qs = visible_appointments(request.professional)
    status = request.GET.get('status')
    if status:
        qs = qs.filter(status=status)
    return JsonResponse({'status': 'ok', 'appointments': [serialize_appointment(a) for a in qs]})


@require_POST
@database_errors
@auth.professional_required
def appointment_status(request, appointment_id):
    appointment = get_object_or_404(visible_appointments(request.professional), pk=appointment_id)
    form = StatusForm(parse_payload(request) or {})
    if not form.is_valid():
        return error_response('Status inválido.', 400, errors=form.errors.get_json_data())
    try:
        appointment = get_store().update_status(
            appointment.pk, form.cleaned_data['status'], actor=request.professional.pk
        )
    except AgendaError as exc:
        return error_response(exc.message, exc.status_code)
    return JsonResponse({'status': 'ok', 'appointment': serialize_appointment(appointment)})


# ----- serviços -----

def save_service(form):
    with transaction.atomic():
        service = form.save()
        get_store().set_service_professionals(
            service, [p.pk for p in form.cleaned_data.get('professionals') or []]
        )
    return service


@require_http_methods(['GET', 'POST'])
@database_errors
@auth.professional_required
def services(request):
    if request.method == 'GET':
        if request.professional.is_admin:
            qs = Service.objects.all()
        else:
            qs = request.professional.services.all()
        return JsonResponse({
            'status': 'ok',
            'services': [serialize_service(s, with_professionals=True) for s in qs.prefetch_related('professionals')],
        })

    if not request.professional.is_admin:
        return forbidden()
    form = ServiceForm(parse_payload(request) or {})
    if not form.is_valid():
        return error_response('Erro ao salvar serviço.', 400, errors=form.errors.get_json_data())
    service = save_service(form)
    logger.info("Serviço %s criado por %s", service.pk, request.professional.pk)
    return JsonResponse({'status': 'ok', 'service': serialize_service(service, with_professionals=True)}, status=201)


@require_POST
@database_errors
@auth.admin_required
def service_detail(request, service_id):
    service = get_object_or_404(Service, pk=service_id)
    form = ServiceForm(parse_payload(request) or {}, instance=service)
    if not form.is_valid():
        return error_response('Erro ao salvar serviço.', 400, errors=form.errors.get_json_data())
    service = save_service(form)
    logger.info("Serviço %s atualizado por %s", service.pk, request.professional.pk)
    return JsonResponse({'status': 'ok', 'service': serialize_service(service, with_professionals=True)})


@require_POST
@database_errors
@auth.admin_required
def service_delete(request, service_id):
    service = get_object_or_404(Service, pk=service_id)
    service.delete()
    logger.info("Serviço %s excluído por %s", service_id, request.professional.pk)
    return JsonResponse({'status': 'ok'})


# ----- profissionais -----

@require_http_methods(['GET', 'POST'])
@database_errors
@auth.admin_required
def professionals(request):
    if request.method == 'GET':
        return JsonResponse({
            'status': 'ok',
            'professionals': [serialize_professional(p) for p in Professional.objects.all()],
        })
    form = ProfessionalForm(parse_payload(request) or {})
    if not form.is_valid():
        return error_response('Erro ao salvar profissional.', 400, errors=form.errors.get_json_data())
    professional = form.save()
    logger.info("Profissional %s criado por %s", professional.pk, request.professional.pk)
    return JsonResponse({'status': 'ok', 'professional': serialize_professional(professional)}, status=201)


@require_POST
@database_errors
@auth.admin_required
def professional_detail(request, professional_id):
    professional = get_object_or_404(Professional, pk=professional_id)
    form = ProfessionalForm(parse_payload(request) or {}, instance=professional)
    if not form.is_valid():
        return error_response('Erro ao salvar profissional.', 400, errors=form.errors.get_json_data())
    professional = form.save()
    return JsonResponse({'status': 'ok', 'professional': serialize_professional(professional)})


@require_POST
@database_errors
@auth.admin_required
def professional_delete(request, professional_id):
    professional = get_object_or_404(Professional, pk=professional_id)
    if professional.pk == request.professional.pk:
        return error_response('Você não pode excluir o próprio usuário.', 409)
    # leva junto agenda e histórico de agendamentos
    professional.delete()
    logger.info("Profissional %s excluído por %s", professional_id, request.professional.pk)
    return JsonResponse({'status': 'ok'})


@require_http_methods(['GET', 'POST'])
@database_errors
@auth.professional_required
def professional_schedule(request, professional_id):
    professional = get_object_or_404(Professional, pk=professional_id)
    if not (request.professional.is_admin or request.professional.pk == professional.pk):
        return forbidden()
    store = get_store()

    if request.method == 'POST':
        payload = parse_payload(request)
        if payload is None:
            return error_response('Dados inválidos.', 400)
        days, errors = clean_schedule(payload.get('days'))
        if errors:
            return error_response('Agenda inválida.', 400, errors=errors)
        store.save_schedule(professional.pk, days)

    return JsonResponse({
        'status': 'ok',
        'professional': serialize_professional(professional),
        'hours': settings.AURA_SCHEDULE_HOURS,
        'days': store.schedule_for(professional.pk),
    })

"""
Login do painel (profissionais e administradores).

A senha é sempre comparada contra o hash salgado gravado em
Professional.password; o id do profissional logado fica na sessão.
"""
import logging
from functools import wraps

from django.contrib.auth.hashers import make_password
from django.http import JsonResponse

from .models import Professional

logger = logging.getLogger(__name__)

SESSION_KEY = 'painel_professional_id'


def authenticate(email, password):
    email = (email or '').strip().lower()
    professional = Professional.objects.filter(email__iexact=email).first() if email else None
    if professional is None or not professional.password:
        # mesmo custo de hash quando o e-mail não existe
        make_password(password)
        logger.warning("Falha de login para %s", email or '<vazio>')
        return None
    if not professional.check_password(password):
        logger.warning("Falha de login para %s", email)
        return None
    return professional


def login(request, professional):
    request.session.cycle_key()
    request.session[SESSION_KEY] = professional.pk
    logger.info("Profissional %s entrou no painel", professional.pk)


def logout(request):
    request.session.flush()


def get_current_professional(request):
    pk = request.session.get(SESSION_KEY)
    if pk is None:
        return None
    return Professional.objects.filter(pk=pk).first()


def professional_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        professional = get_current_professional(request)
        if professional is None:
            return JsonResponse({'status': 'error', 'message': 'Faça login para continuar.'}, status=401)
        request.professional = professional
        return view(request, *args, **kwargs)
    return wrapper


def admin_required(view):
    @wraps(view)
    @professional_required
    def wrapper(request, *args, **kwargs):
        if not request.professional.is_admin:
            return JsonResponse({'status': 'error', 'message': 'Acesso restrito ao administrador.'}, status=403)
        return view(request, *args, **kwargs)
    return wrapper

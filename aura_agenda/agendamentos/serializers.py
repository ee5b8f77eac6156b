from django.utils import timezone

from .pix import format_brl


def serialize_service(service, with_professionals=False):
    data = {
        'id': service.pk,
        'name': service.name,
        'description': service.description,
        'duration_minutes': service.duration_minutes,
        'price': str(service.price),
        'price_display': format_brl(service.price),
        'pix_key': service.pix_key,
        'pix_qr_url': service.pix_qr_url,
        'image_url': service.image_url,
        'category': service.category,
    }
    if with_professionals:
        data['professional_ids'] = [p.pk for p in service.professionals.all()]
    return data


def serialize_professional(professional):
    # a senha (hash) nunca sai do servidor
    return {
        'id': professional.pk,
        'name': professional.name,
        'role': professional.role,
        'bio': professional.bio,
        'photo_url': professional.photo_url,
        'email': professional.email,
        'is_admin': professional.is_admin,
    }


def serialize_appointment(appointment):
    return {
        'id': appointment.pk,
        'service': appointment.service.name,
        'service_id': appointment.service_id,
        'professional': appointment.professional.name,
        'professional_id': appointment.professional_id,
        'customer_name': appointment.customer_name,
        'customer_phone': appointment.customer_phone,
        'start': timezone.localtime(appointment.start_time).isoformat(),
        'end': timezone.localtime(appointment.end_time).isoformat(),
        'status': appointment.status,
        'status_display': appointment.get_status_display(),
        'notes': appointment.notes,
        'created_at': appointment.created_at.isoformat() if appointment.created_at else None,
    }

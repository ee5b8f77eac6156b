import re
from datetime import timedelta

from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .exceptions import InvalidTransition

# 0=domingo, como no calendário do cliente
DAYS_OF_WEEK = ['Domingo', 'Segunda', 'Terça', 'Quarta', 'Quinta', 'Sexta', 'Sábado']

TIME_SLOT_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def validate_time_slots(value):
    if not isinstance(value, list):
        raise ValidationError('time_slots deve ser uma lista de horários "HH:MM".')
    for slot in value:
        if not isinstance(slot, str) or not TIME_SLOT_RE.match(slot):
            raise ValidationError(f'Horário inválido: {slot!r} (use HH:MM).')


class Professional(models.Model):
    name = models.CharField(max_length=120)
    role = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)
    photo_url = models.URLField(blank=True)
    email = models.EmailField(unique=True, null=True, blank=True)
    password = models.CharField(max_length=128, blank=True)
    is_admin = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        def setter(raw):
            # rehash quando o hasher padrão muda
            self.set_password(raw)
            self.save(update_fields=['password'])
        return check_password(raw_password, self.password, setter)


class Service(models.Model):
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(default=60, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=8, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    pix_key = models.CharField(max_length=140, blank=True)
    pix_qr_url = models.URLField(blank=True)
    image_url = models.URLField(blank=True)
    category = models.CharField(max_length=60, default='Geral')
    professionals = models.ManyToManyField(Professional, related_name='services', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"


class Availability(models.Model):
    professional = models.ForeignKey(Professional, on_delete=models.CASCADE, related_name='availabilities')
    day_of_week = models.PositiveSmallIntegerField(choices=list(enumerate(DAYS_OF_WEEK)))
    time_slots = models.JSONField(default=list, blank=True, validators=[validate_time_slots])
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ['professional', 'day_of_week']
        constraints = [
            models.UniqueConstraint(fields=['professional', 'day_of_week'], name='unique_availability_per_day'),
        ]

    def __str__(self):
        return f"{self.professional} - {DAYS_OF_WEEK[self.day_of_week]}"

    def save(self, *args, **kwargs):
        # "HH:MM" com zero à esquerda ordena corretamente como string
        self.time_slots = sorted(set(self.time_slots or []))
        super().save(*args, **kwargs)


class Appointment(models.Model):
    WAITING_PAYMENT = 'waiting_payment'
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (WAITING_PAYMENT, 'Aguardando pagamento'),
        (PENDING, 'Pendente'),
        (CONFIRMED, 'Confirmado'),
        (REJECTED, 'Rejeitado'),
        (CANCELLED, 'Cancelado'),
    ]

    # status que não ocupam a agenda
    INACTIVE_STATUSES = (REJECTED, CANCELLED)

    TRANSITIONS = {
        WAITING_PAYMENT: (PENDING, CONFIRMED, REJECTED),
        PENDING: (CONFIRMED, REJECTED),
        CONFIRMED: (CANCELLED,),
        REJECTED: (),
        CANCELLED: (),
    }

    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='appointments')
    professional = models.ForeignKey(Professional, on_delete=models.CASCADE, related_name='appointments')
    customer_name = models.CharField(max_length=120)
    customer_phone = models.CharField(max_length=30)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['professional', 'start_time'], name='appointment_prof_start_idx'),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.service.name} @ {self.start_time}"

    def save(self, *args, **kwargs):
        # end_time nunca é editado à parte
        self.end_time = self.start_time + timedelta(minutes=self.service.duration_minutes)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'start_time' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'end_time'}
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        return self.status not in self.INACTIVE_STATUSES

    def can_transition(self, status):
        return status in self.TRANSITIONS.get(self.status, ())

    def transition_to(self, status):
        if not self.can_transition(status):
            raise InvalidTransition(
                f"Transição de status não permitida: {self.status} -> {status}"
            )
        self.status = status

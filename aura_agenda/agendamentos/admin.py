from datetime import timedelta

from django import forms
from django.contrib import admin, messages
from .availability import check_conflict, make_aware_if_naive
from .exceptions import AgendaError, BookingConflict
from .models import Appointment, Availability, Professional, Service
from .store import get_store
class AvailabilityInline(admin.TabularInline):
    model = Availability
    extra = 0
@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    list_display = ('name','role','email','is_admin')
    exclude = ('password',)
    inlines = [AvailabilityInline]
@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('name','category','duration_minutes','price')
    filter_horizontal = ('professionals',)
@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ('professional','day_of_week','is_available','time_slots')
    list_filter = ('professional','day_of_week')

class AppointmentAdminForm(forms.ModelForm):
    class Meta:
        model = Appointment
        fields = '__all__'

    def clean(self):
        cleaned = super().clean()
        service, prof, start = cleaned.get('service'), cleaned.get('professional'), cleaned.get('start_time')
        if self.instance.pk is None and service and prof and start:
            start = make_aware_if_naive(start)
            end = start + timedelta(minutes=service.duration_minutes)
            if check_conflict(prof.pk, start, end, get_store()):
                raise forms.ValidationError(BookingConflict.default_message)
        return cleaned

def change_status(modeladmin, request, queryset, status):
    # passa pela máquina de status, um agendamento por vez
    changed = 0
    for appointment in queryset:
        try:
            get_store().update_status(appointment.pk, status, actor='admin')
            changed += 1
        except AgendaError as exc:
            modeladmin.message_user(request, f"{appointment}: {exc.message}", messages.ERROR)
    if changed:
        modeladmin.message_user(request, f"{changed} agendamento(s) atualizado(s).", messages.SUCCESS)

@admin.action(description='Confirmar agendamentos selecionados')
def confirm_appointments(modeladmin, request, queryset):
    change_status(modeladmin, request, queryset, Appointment.CONFIRMED)

@admin.action(description='Rejeitar agendamentos selecionados')
def reject_appointments(modeladmin, request, queryset):
    change_status(modeladmin, request, queryset, Appointment.REJECTED)

@admin.action(description='Cancelar agendamentos selecionados')
def cancel_appointments(modeladmin, request, queryset):
    change_status(modeladmin, request, queryset, Appointment.CANCELLED)

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    form = AppointmentAdminForm
    list_display = ('customer_name','service','professional','start_time','end_time','status','created_at')
    list_filter = ('status','professional','service')
    search_fields = ('customer_name','customer_phone')
    actions = [confirm_appointments, reject_appointments, cancel_appointments]

    def get_readonly_fields(self, request, obj=None):
        # status só muda pelas ações; horário e profissional não mudam depois de marcados
        if obj is None:
            return ('status','end_time')
        return ('service','professional','start_time','end_time','status')

    def save_model(self, request, obj, form, change):
        if change:
            return super().save_model(request, obj, form, change)
        # reserva pelo mesmo caminho do site: trava e confere conflito de novo
        appointment = get_store().book(
            obj.professional, obj.service, obj.start_time,
            customer_name=obj.customer_name, customer_phone=obj.customer_phone,
            status=obj.status, notes=obj.notes,
        )
        obj.pk = appointment.pk
        obj.refresh_from_db()

from django import forms

from .models import Appointment, Professional, Service, validate_time_slots


class CustomerDetailsForm(forms.Form):
    client_name = forms.CharField(max_length=120)
    client_phone = forms.CharField(max_length=30)

    def clean_client_name(self):
        value = self.cleaned_data['client_name'].strip()
        if not value:
            raise forms.ValidationError('Informe seu nome.')
        return value

    def clean_client_phone(self):
        value = self.cleaned_data['client_phone'].strip()
        if not value:
            raise forms.ValidationError('Informe seu telefone.')
        return value


class SlotsQueryForm(forms.Form):
    day = forms.DateField(input_formats=['%Y-%m-%d'])
    service_id = forms.IntegerField(min_value=1)
    professional_id = forms.IntegerField(min_value=1)


class SlotChoiceForm(forms.Form):
    slot = forms.RegexField(regex=r'^([01]\d|2[0-3]):[0-5]\d$')
    generation = forms.IntegerField(min_value=0)


class DayChoiceForm(forms.Form):
    day = forms.DateField(input_formats=['%Y-%m-%d'])


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class StatusForm(forms.Form):
    status = forms.ChoiceField(choices=Appointment.STATUS_CHOICES)


class ServiceForm(forms.ModelForm):
    professionals = forms.ModelMultipleChoiceField(queryset=Professional.objects.all(), required=False)

    class Meta:
        model = Service
        fields = ['name', 'description', 'duration_minutes', 'price', 'pix_key',
                  'pix_qr_url', 'image_url', 'category']


class ProfessionalForm(forms.ModelForm):
    # vazio na edição mantém a senha atual
    password = forms.CharField(required=False, strip=False)

    class Meta:
        model = Professional
        fields = ['name', 'role', 'bio', 'photo_url', 'email', 'is_admin']

    def clean_email(self):
        email = self.cleaned_data.get('email')
        return email.lower() if email else None

    def clean(self):
        cleaned = super().clean()
        if self.instance.pk is None and not cleaned.get('password'):
            self.add_error('password', 'Informe uma senha para o novo profissional.')
        return cleaned

    def save(self, commit=True):
        professional = super().save(commit=False)
        if self.cleaned_data.get('password'):
            professional.set_password(self.cleaned_data['password'])
        if commit:
            professional.save()
        return professional


class ScheduleDayForm(forms.Form):
    day_of_week = forms.IntegerField(min_value=0, max_value=6)
    time_slots = forms.JSONField(required=False)
    is_available = forms.BooleanField(required=False)

    def clean_time_slots(self):
        value = self.cleaned_data.get('time_slots') or []
        validate_time_slots(value)
        return sorted(set(value))


def clean_schedule(days):
    """
    Valida a lista de dias enviada pelo editor de agenda.
    Retorna (dias_limpos, erros); erros é indexado pela posição na lista.
    """
    if not isinstance(days, list) or len(days) > 7:
        return [], {"days": "Envie uma lista com no máximo sete dias."}
    cleaned, errors, seen = [], {}, set()
    for index, day in enumerate(days):
        form = ScheduleDayForm(day if isinstance(day, dict) else {})
        if not form.is_valid():
            errors[index] = form.errors.get_json_data()
            continue
        dow = form.cleaned_data['day_of_week']
        if dow in seen:
            errors[index] = {'day_of_week': [{'message': 'Dia repetido.', 'code': 'duplicate'}]}
            continue
        seen.add(dow)
        cleaned.append(form.cleaned_data)
    return cleaned, errors

"""
Máquina de estados do agendamento feito pelo cliente.

Cada passo tem nome e as mudanças de passo só acontecem pelos eventos da
tabela TRANSITIONS. O estado fica na sessão do Django (to_dict/from_dict).
"""
from .exceptions import InvalidTransition, StaleSelection

SESSION_KEY = 'booking_wizard'

SELECT_SERVICE = 'select_service'
SELECT_PROFESSIONAL = 'select_professional'
SELECT_DATE = 'select_date'
USER_DETAILS = 'user_details'
PAYMENT = 'payment'
CONFIRMATION = 'confirmation'

STATES = (SELECT_SERVICE, SELECT_PROFESSIONAL, SELECT_DATE, USER_DETAILS, PAYMENT, CONFIRMATION)

TRANSITIONS = {
    (SELECT_SERVICE, 'choose_service'): SELECT_PROFESSIONAL,
    (SELECT_PROFESSIONAL, 'choose_professional'): SELECT_DATE,
    (SELECT_PROFESSIONAL, 'back'): SELECT_SERVICE,
    (SELECT_DATE, 'choose_date'): SELECT_DATE,
    (SELECT_DATE, 'choose_slot'): SELECT_DATE,
    (SELECT_DATE, 'proceed'): USER_DETAILS,
    (SELECT_DATE, 'back'): SELECT_PROFESSIONAL,
    (USER_DETAILS, 'submit_details'): PAYMENT,
    (USER_DETAILS, 'slot_taken'): SELECT_DATE,
    (USER_DETAILS, 'back'): SELECT_DATE,
    (PAYMENT, 'confirm_payment'): CONFIRMATION,
}

FIELDS = (
    'service_id', 'professional_id', 'day', 'slot',
    'customer_name', 'customer_phone', 'appointment_id',
)


class BookingWizard:

    def __init__(self, state=SELECT_SERVICE, generation=0, **data):
        if state not in STATES:
            state = SELECT_SERVICE
        self.state = state
        self.generation = generation
        for field in FIELDS:
            setattr(self, field, data.get(field))

    @classmethod
    def from_session(cls, session):
        return cls(**session.get(SESSION_KEY, {}))

    def save(self, session):
        session[SESSION_KEY] = self.to_dict()

    def to_dict(self):
        data = {'state': self.state, 'generation': self.generation}
        for field in FIELDS:
            data[field] = getattr(self, field)
        return data

    def allowed_events(self):
        events = [event for (state, event) in TRANSITIONS if state == self.state]
        return events + ['restart']

    def fire(self, event):
        if event == 'restart':
            self.state = SELECT_SERVICE
            self.generation += 1
            for field in FIELDS:
                setattr(self, field, None)
            return self.state
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransition(f"Evento '{event}' não é válido no passo '{self.state}'.")
        self.state = target
        return target

    def _bump(self):
        # invalida listas de horários calculadas antes da mudança
        self.generation += 1
        self.slot = None

    def choose_service(self, service_id):
        self.fire('choose_service')
        self.service_id = service_id
        self.professional_id = None
        self._bump()

    def choose_professional(self, professional_id):
        self.fire('choose_professional')
        self.professional_id = professional_id
        self._bump()

    def choose_date(self, day):
        self.fire('choose_date')
        self.day = day
        self._bump()

    def choose_slot(self, slot, generation):
        if self.state == SELECT_DATE and generation != self.generation:
            raise StaleSelection()
        self.fire('choose_slot')
        self.slot = slot

    def proceed(self):
        if self.state == SELECT_DATE and not (self.day and self.slot):
            raise InvalidTransition('Escolha um dia e um horário antes de continuar.')
        self.fire('proceed')

    def submit_details(self, customer_name, customer_phone, appointment_id):
        self.fire('submit_details')
        self.customer_name = customer_name
        self.customer_phone = customer_phone
        self.appointment_id = appointment_id

    def slot_taken(self):
        self.fire('slot_taken')
        self._bump()

    def back(self):
        self.fire('back')
        if self.state == SELECT_DATE:
            self.slot = None

    def confirm_payment(self):
        self.fire('confirm_payment')

    def restart(self):
        self.fire('restart')

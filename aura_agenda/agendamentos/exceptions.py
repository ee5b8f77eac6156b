class AgendaError(Exception):
    """Erro de regra de negócio da agenda (nunca fatal, sempre vira resposta HTTP)."""
    status_code = 400
    default_message = 'Não foi possível concluir a operação.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BookingConflict(AgendaError):
    status_code = 409
    default_message = (
        'Desculpe, este horário acabou de ser reservado por outro cliente. '
        'Por favor, escolha outro horário.'
    )


class InvalidTransition(AgendaError):
    status_code = 409
    default_message = 'Transição não permitida.'


class StaleSelection(AgendaError):
    status_code = 409
    default_message = 'A lista de horários mudou. Atualize e escolha novamente.'

import pytest

from agendamentos import wizard as steps
from agendamentos.exceptions import InvalidTransition, StaleSelection
from agendamentos.wizard import BookingWizard


def at_select_date():
    wizard = BookingWizard()
    wizard.choose_service(1)
    wizard.choose_professional(2)
    wizard.choose_date('2026-10-19')
    return wizard


def test_happy_path_walks_every_step():
    wizard = at_select_date()
    assert wizard.state == steps.SELECT_DATE
    wizard.choose_slot('09:00', wizard.generation)
    wizard.proceed()
    assert wizard.state == steps.USER_DETAILS
    wizard.submit_details('Maria Silva', '11999999999', 42)
    assert wizard.state == steps.PAYMENT
    wizard.confirm_payment()
    assert wizard.state == steps.CONFIRMATION
    assert wizard.appointment_id == 42


def test_event_outside_its_step_is_rejected():
    wizard = BookingWizard()
    with pytest.raises(InvalidTransition):
        wizard.confirm_payment()
    assert wizard.state == steps.SELECT_SERVICE


def test_payment_step_has_no_way_back():
    wizard = at_select_date()
    wizard.choose_slot('09:00', wizard.generation)
    wizard.proceed()
    wizard.submit_details('Maria Silva', '11999999999', 1)
    assert 'back' not in wizard.allowed_events()
    with pytest.raises(InvalidTransition):
        wizard.back()


def test_proceed_requires_a_slot():
    wizard = at_select_date()
    with pytest.raises(InvalidTransition):
        wizard.proceed()
    assert wizard.state == steps.SELECT_DATE


def test_changing_date_invalidates_earlier_slot_lists():
    wizard = at_select_date()
    old_generation = wizard.generation
    wizard.choose_slot('09:00', old_generation)
    wizard.choose_date('2026-10-20')
    assert wizard.slot is None
    assert wizard.generation == old_generation + 1
    with pytest.raises(StaleSelection):
        wizard.choose_slot('10:00', old_generation)
    assert wizard.slot is None


def test_slot_taken_returns_to_date_step():
    wizard = at_select_date()
    wizard.choose_slot('09:00', wizard.generation)
    wizard.proceed()
    wizard.slot_taken()
    assert wizard.state == steps.SELECT_DATE
    assert wizard.slot is None


def test_back_walks_one_step():
    wizard = at_select_date()
    wizard.back()
    assert wizard.state == steps.SELECT_PROFESSIONAL
    wizard.back()
    assert wizard.state == steps.SELECT_SERVICE


def test_restart_clears_everything_from_any_step():
    wizard = at_select_date()
    generation = wizard.generation
    wizard.restart()
    assert wizard.state == steps.SELECT_SERVICE
    assert wizard.service_id is None and wizard.day is None
    assert wizard.generation == generation + 1


def test_session_round_trip():
    session = {}
    wizard = at_select_date()
    wizard.choose_slot('10:00', wizard.generation)
    wizard.save(session)

    restored = BookingWizard.from_session(session)
    assert restored.to_dict() == wizard.to_dict()
    assert session[steps.SESSION_KEY]['state'] == steps.SELECT_DATE


def test_unknown_state_in_session_starts_over():
    restored = BookingWizard.from_session({steps.SESSION_KEY: {'state': 'passo_inexistente'}})
    assert restored.state == steps.SELECT_SERVICE

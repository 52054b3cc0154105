import itertools

import pytest

from src.models.enums import ApplicationStatus
from src.services.status_transitions import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, is_valid_transition

S = ApplicationStatus

ALLOWED = {
    (S.DRAFT, S.SUBMITTED),
    (S.SUBMITTED, S.APPROVED),
    (S.SUBMITTED, S.RETURNED),
    (S.SUBMITTED, S.REJECTED),
    (S.RETURNED, S.SUBMITTED),
}


@pytest.mark.parametrize("src,dst", list(itertools.product(S, S)))
def test_transition_table_is_exact(src, dst):
    assert is_valid_transition(src, dst) is ((src, dst) in ALLOWED)


def test_accepts_plain_string_statuses():
    assert is_valid_transition("DRAFT", "SUBMITTED") is True
    assert is_valid_transition("APPROVED", "SUBMITTED") is False


def test_unknown_status_is_invalid_not_an_error():
    assert is_valid_transition("DELETED", "SUBMITTED") is False
    assert is_valid_transition("DRAFT", "nonsense") is False


def test_terminal_statuses_have_no_outgoing_transitions():
    assert TERMINAL_STATUSES == {S.APPROVED, S.REJECTED}
    for status in TERMINAL_STATUSES:
        assert ALLOWED_TRANSITIONS[status] == frozenset()

from __future__ import annotations

from src.models.enums import ApplicationStatus

_S = ApplicationStatus

ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    _S.DRAFT: frozenset({_S.SUBMITTED}),
    _S.SUBMITTED: frozenset({_S.APPROVED, _S.RETURNED, _S.REJECTED}),
    _S.RETURNED: frozenset({_S.SUBMITTED}),
    _S.APPROVED: frozenset(),
    _S.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def _coerce(status: ApplicationStatus | str) -> ApplicationStatus | None:
    try:
        return ApplicationStatus(status)
    except ValueError:
        return None


def is_valid_transition(from_status: ApplicationStatus | str, to_status: ApplicationStatus | str) -> bool:
    """Whether ``from_status -> to_status`` is in the transition table.

    Total over any input: unknown statuses are simply not valid.
    """

    src = _coerce(from_status)
    dst = _coerce(to_status)
    if src is None or dst is None:
        return False
    return dst in ALLOWED_TRANSITIONS[src]

"""
Document status lifecycle for quotes and invoices.

Every status change goes through ``apply_event`` or ``transition``; no code
path writes a status column directly.
"""
import logging
from typing import Dict, Tuple

from pluridesk.exceptions import IllegalTransition
from pluridesk.models.invoice import InvoiceStatus
from pluridesk.models.quote import QuoteStatus

logger = logging.getLogger(__name__)

QUOTE = "quote"
INVOICE = "invoice"

# kind -> {(current, event): new}
TRANSITIONS: Dict[str, Dict[Tuple[str, str], str]] = {
    QUOTE: {
        (QuoteStatus.DRAFT.value, "send"): QuoteStatus.SENT.value,
        (QuoteStatus.DRAFT.value, "accept"): QuoteStatus.ACCEPTED.value,
        (QuoteStatus.DRAFT.value, "reject"): QuoteStatus.REJECTED.value,
        (QuoteStatus.SENT.value, "accept"): QuoteStatus.ACCEPTED.value,
        (QuoteStatus.SENT.value, "reject"): QuoteStatus.REJECTED.value,
    },
    INVOICE: {
        (InvoiceStatus.DRAFT.value, "send"): InvoiceStatus.SENT.value,
        (InvoiceStatus.SENT.value, "mark_paid"): InvoiceStatus.PAID.value,
        (InvoiceStatus.SENT.value, "mark_overdue"): InvoiceStatus.OVERDUE.value,
        (InvoiceStatus.OVERDUE.value, "mark_paid"): InvoiceStatus.PAID.value,
    },
}

INITIAL_STATUS = {
    QUOTE: QuoteStatus.DRAFT.value,
    INVOICE: InvoiceStatus.DRAFT.value,
}


def _value(status) -> str:
    return getattr(status, "value", status)


def apply_event(kind: str, current: str, event: str) -> str:
    """Return the status reached from ``current`` by ``event``"""
    current = _value(current)
    try:
        return TRANSITIONS[kind][(current, event)]
    except KeyError:
        raise IllegalTransition(
            kind, current, event,
            message=f"Cannot {event.replace('_', ' ')} {kind} with status {current}",
        ) from None


def allowed_targets(kind: str, current: str) -> list[str]:
    current = _value(current)
    return [new for (state, _), new in TRANSITIONS[kind].items() if state == current]


def is_terminal(kind: str, status: str) -> bool:
    return not allowed_targets(kind, status)


def transition(kind: str, current: str, target: str) -> str:
    """Validate moving from ``current`` to ``target``.

    Re-writing the current status is a no-op; anything not reachable through
    one event raises IllegalTransition.
    """
    current, target = _value(current), _value(target)
    if current == target:
        return target

    for (state, event), new in TRANSITIONS[kind].items():
        if state == current and new == target:
            logger.debug(f"{kind} {current} -> {target} via {event}")
            return new

    raise IllegalTransition(kind, current, target)

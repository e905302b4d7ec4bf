"""
Quote and invoice status lifecycle tests.
"""
import pytest

from pluridesk.exceptions import IllegalTransition
from pluridesk.models.invoice import InvoiceStatus
from pluridesk.services.lifecycle import (
    INVOICE, QUOTE, allowed_targets, apply_event, is_terminal, transition,
)


# ===================== QUOTES =====================


@pytest.mark.parametrize(
    "current,event,expected",
    [
        ("draft", "send", "sent"),
        ("draft", "accept", "accepted"),
        ("sent", "accept", "accepted"),
        ("draft", "reject", "rejected"),
        ("sent", "reject", "rejected"),
    ],
)
def test_quote_events(current, event, expected):
    assert apply_event(QUOTE, current, event) == expected


@pytest.mark.parametrize("current", ["accepted", "rejected"])
def test_quote_terminal_states_cannot_be_accepted(current):
    with pytest.raises(IllegalTransition) as exc:
        apply_event(QUOTE, current, "accept")
    assert exc.value.status_code == 409
    assert exc.value.message == f"Cannot accept quote with status {current}"


def test_quote_cannot_be_resent():
    with pytest.raises(IllegalTransition):
        apply_event(QUOTE, "sent", "send")


def test_quote_terminal_states():
    assert is_terminal(QUOTE, "accepted")
    assert is_terminal(QUOTE, "rejected")
    assert not is_terminal(QUOTE, "draft")


# ===================== INVOICES =====================


def test_invoice_happy_path():
    status = apply_event(INVOICE, "draft", "send")
    status = apply_event(INVOICE, status, "mark_overdue")
    assert apply_event(INVOICE, status, "mark_paid") == "paid"


def test_invoice_paid_is_terminal():
    assert allowed_targets(INVOICE, "paid") == []


def test_draft_invoice_cannot_be_paid_directly():
    with pytest.raises(IllegalTransition) as exc:
        transition(INVOICE, "draft", "paid")
    assert exc.value.message == "Cannot change invoice status from draft to paid"


def test_transition_accepts_enum_members():
    assert transition(INVOICE, InvoiceStatus.SENT, InvoiceStatus.PAID) == "paid"


def test_transition_to_same_status_is_noop():
    assert transition(INVOICE, "paid", "paid") == "paid"


def test_paid_invoice_cannot_go_back_to_draft():
    with pytest.raises(IllegalTransition):
        transition(INVOICE, "paid", "draft")


def test_allowed_targets_from_sent():
    assert sorted(allowed_targets(INVOICE, "sent")) == ["overdue", "paid"]

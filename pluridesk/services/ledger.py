"""
Payment ledger read model.

The outstanding balance is derived from current rows on every read and never
stored. It is not clamped: a negative balance means the invoice was overpaid.
"""
from typing import Any, Iterable, Mapping, Optional

from pluridesk.utils.money import round2


def _amount(payment: Any) -> float:
    if isinstance(payment, Mapping):
        value = payment.get("amount")
    else:
        value = getattr(payment, "amount", None)
    return float(value or 0)


def amount_paid(payments: Iterable[Any]) -> float:
    return round2(sum(_amount(p) for p in payments))


def outstanding_balance(invoice_total: Optional[float], payments: Iterable[Any]) -> float:
    """invoice total minus everything paid so far"""
    return round2((invoice_total or 0) - amount_paid(payments))


def is_overpaid(invoice_total: Optional[float], payments: Iterable[Any]) -> bool:
    return outstanding_balance(invoice_total, payments) < 0

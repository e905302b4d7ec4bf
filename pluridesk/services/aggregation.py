"""
Per-currency aggregation used by reports and dashboards.

Amounts in different currencies are never combined; each currency gets its
own running sum.
"""
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from pluridesk.utils.money import DEFAULT_CURRENCY, round2


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def sum_by_currency(
    records: Iterable[Any],
    amount_field: str,
    currency_field: str = "currency",
    where: Optional[Callable[[Any], bool]] = None,
) -> Dict[str, float]:
    """Group records by currency code and sum one amount field per group.

    ``where`` filters records before grouping. A missing currency counts as
    USD and a missing amount as 0.
    """
    totals: Dict[str, float] = {}
    for record in records:
        if where is not None and not where(record):
            continue
        currency = _field(record, currency_field) or DEFAULT_CURRENCY
        amount = _field(record, amount_field) or 0
        totals[currency] = totals.get(currency, 0) + float(amount)

    return {currency: round2(total) for currency, total in totals.items()}


def status_in(*statuses: str) -> Callable[[Any], bool]:
    allowed = {getattr(s, "value", s) for s in statuses}
    return lambda record: _field(record, "status") in allowed


def unpaid(record: Any) -> bool:
    return not _field(record, "paid")

"""
Line-item arithmetic shared by quotes, invoices and jobs.

amount = quantity * rate per line, subtotal = sum of amounts,
total = subtotal + tax. Everything is kept at 2 decimal places.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from pluridesk.models.job import PricingType
from pluridesk.utils.money import round2


@dataclass
class LineItemTotals:
    amounts: List[float] = field(default_factory=list)
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0


def _get(item: Any, key: str) -> Optional[float]:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def line_amount(quantity: Optional[float], rate: Optional[float]) -> float:
    """Amount for one line; missing quantity or rate counts as 0"""
    return round2((quantity or 0) * (rate or 0))


def calculate_totals(items: Iterable[Any], tax_amount: Optional[float] = 0) -> LineItemTotals:
    """Compute per-line amounts, subtotal and total.

    ``items`` may be dicts, pydantic models or ORM rows with ``quantity`` and
    ``rate``. Raises ValueError for a negative tax amount.
    """
    tax = round2(tax_amount)
    if tax < 0:
        raise ValueError("Tax amount cannot be negative")

    amounts = [line_amount(_get(item, "quantity"), _get(item, "rate")) for item in items]
    subtotal = round2(sum(amounts))
    return LineItemTotals(
        amounts=amounts,
        subtotal=subtotal,
        tax_amount=tax,
        total=round2(subtotal + tax),
    )


def build_line_items(items: Iterable[Any]) -> List[dict]:
    """Normalize items to ``{description, quantity, rate, amount}`` dicts"""
    rows = []
    for item in items:
        quantity = _get(item, "quantity")
        rate = _get(item, "rate")
        rows.append({
            "description": _get(item, "description"),
            "quantity": quantity,
            "rate": rate,
            "amount": line_amount(quantity, rate),
        })
    return rows


def job_total(pricing_type: Optional[str], quantity: Optional[float], rate: Optional[float]) -> float:
    """Total for a job: flat fee jobs bill the rate as-is, others quantity * rate"""
    if pricing_type == PricingType.FLAT_FEE.value:
        return round2(rate)
    return line_amount(quantity, rate)

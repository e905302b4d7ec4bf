"""
Money helpers - rounding, display formatting and parsing of currency amounts.

Amounts are plain floats kept at two decimal places for every currency.
"""
import re
from typing import Optional

SUPPORTED_CURRENCIES = {
    "USD": {"name": "US Dollar", "symbol": "$"},
    "EUR": {"name": "Euro", "symbol": "€"},
    "CAD": {"name": "Canadian Dollar", "symbol": "CA$"},
    "MAD": {"name": "Moroccan Dirham", "symbol": "MAD"},
    "GBP": {"name": "British Pound", "symbol": "£"},
}

DEFAULT_CURRENCY = "USD"


def round2(value: Optional[float]) -> float:
    """Round an amount to 2 decimal places (None counts as 0)"""
    if value is None:
        return 0.0
    # + 0.0 folds -0.0 into 0.0
    return round(float(value), 2) + 0.0


def currency_symbol(currency: str) -> str:
    info = SUPPORTED_CURRENCIES.get((currency or "").upper())
    if info:
        return info["symbol"]
    return (currency or DEFAULT_CURRENCY).upper()


def _prefix(currency: str) -> str:
    symbol = currency_symbol(currency)
    # Alphabetic symbols (MAD, unknown ISO codes) are followed by a space
    if symbol[-1].isalpha():
        return f"{symbol} "
    return symbol


def format_currency(amount: Optional[float], currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount for display, e.g. ``$1,234.50`` or ``-€40.00``"""
    value = round2(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{_prefix(currency)}{abs(value):,.2f}"


_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")
_ISO_CODE_RE = re.compile(r"^[A-Za-z]{3}(?=[\s\d-])")


def parse_currency(text: str, currency: Optional[str] = None) -> float:
    """Parse a display string produced by ``format_currency`` back to a float.

    Accepts a leading minus or accounting parentheses, any supported symbol
    or ISO code, and thousands separators.
    """
    if text is None:
        raise ValueError("Cannot parse empty amount")

    raw = str(text).strip()
    negative = False
    if raw.startswith("(") and raw.endswith(")"):
        negative = True
        raw = raw[1:-1].strip()
    if raw.startswith("-"):
        negative = not negative
        raw = raw[1:].strip()

    candidates = []
    if currency:
        candidates.append(currency_symbol(currency))
        candidates.append(currency.upper())
    for code, info in SUPPORTED_CURRENCIES.items():
        candidates.extend([info["symbol"], code])

    # Longest first so "CA$" wins over "$"
    for token in sorted(set(candidates), key=len, reverse=True):
        if raw.upper().startswith(token.upper()):
            raw = raw[len(token):]
            break
        if raw.upper().endswith(token.upper()):
            raw = raw[: -len(token)]
            break
    else:
        # Unlisted ISO codes, as format_currency writes them
        raw = _ISO_CODE_RE.sub("", raw, count=1)

    raw = raw.replace(",", "").replace(" ", "").strip()
    if raw.startswith("-"):
        negative = not negative
        raw = raw[1:]

    if not _NUMBER_RE.match(raw):
        raise ValueError(f"Cannot parse amount: {text!r}")

    value = float(raw)
    return -value if negative else value

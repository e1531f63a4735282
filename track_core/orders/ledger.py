# track_core/orders/ledger.py
"""
Payment ledger codec.

An order's payments are persisted as one human-readable string:

    "Pix (R$ 20,00) + Cash (R$ 30,00)"

Each entry is "<method> (<amount>)" and entries are joined by " + ".
The cached paid amount on the order is always re-derived with decode()
after append/remove, never by incremental arithmetic.

Pure functions; no Django imports.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

SEPARATOR = " + "
DEFAULT_SYMBOL = "R$"
CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]

# last "( ... )" group of a segment
_GROUP_RE = re.compile(r"\(([^()]*)\)")
# 1.234,56 | 150,00 | 150 | 1.234
_AMOUNT_RE = re.compile(r"(\d{1,3}(?:\.\d{3})+|\d+)(?:,(\d{1,2}))?")


class IndexOutOfBounds(IndexError):
    """Entry index outside the ledger."""


@dataclass(frozen=True)
class LedgerEntry:
    label: str
    amount: Optional[Decimal]
    raw: str


@dataclass(frozen=True)
class LedgerSummary:
    total: Decimal
    amounts: list = field(default_factory=list)
    unparsed: int = 0


def to_cents(amount: Number) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not value.is_finite():
            raise ValueError(f"Not a finite number: {amount!r}")
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Not a number: {amount!r}")


def format_currency(amount: Number, symbol: str = DEFAULT_SYMBOL) -> str:
    """
    Decimal -> "R$ 1.234,56" (dot thousands, comma decimals, two places).
    """
    value = to_cents(amount)
    sign = "-" if value < 0 else ""
    # 1,234.56 -> 1.234,56
    body = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {body}"


def encode_entry(method_label: str, amount: Number, symbol: str = DEFAULT_SYMBOL) -> str:
    return f"{method_label} ({format_currency(amount, symbol)})"


def split_entries(ledger: Optional[str]) -> list[str]:
    if not ledger or not ledger.strip():
        return []
    return ledger.split(SEPARATOR)


def join_entries(segments: list[str]) -> str:
    return SEPARATOR.join(segments)


def parse_amount(segment: str) -> Optional[Decimal]:
    """
    Amount inside the last parenthesized group, or None when there is none.
    Thousands dots and a decimal comma are accepted; any currency prefix is ignored.
    """
    groups = _GROUP_RE.findall(segment or "")
    if not groups:
        return None

    m = _AMOUNT_RE.search(groups[-1])
    if m is None:
        return None

    integer, cents = m.group(1), m.group(2) or "0"
    return to_cents(f"{integer.replace('.', '')}.{cents}")


def parse_label(segment: str) -> str:
    idx = segment.rfind("(")
    if idx == -1:
        return segment.strip()
    return segment[:idx].strip()


def entries(ledger: Optional[str]) -> list[LedgerEntry]:
    """
    Ordered view of the ledger, one record per payment.
    """
    return [
        LedgerEntry(label=parse_label(seg), amount=parse_amount(seg), raw=seg)
        for seg in split_entries(ledger)
    ]


def decode(ledger: Optional[str]) -> LedgerSummary:
    """
    Sums every parseable entry. Unparseable entries count as 0 but are kept
    in the string; their number is reported in `unparsed`.
    """
    amounts = []
    unparsed = 0
    for seg in split_entries(ledger):
        amount = parse_amount(seg)
        if amount is None:
            unparsed += 1
            amount = Decimal("0.00")
        amounts.append(amount)

    total = sum(amounts, Decimal("0.00"))
    return LedgerSummary(total=total, amounts=amounts, unparsed=unparsed)


def validate_label(method_label: str) -> str:
    label = (method_label or "").strip()
    if not label:
        raise ValueError("Payment method label is required.")
    if SEPARATOR in f" {label} ":
        raise ValueError(f"Payment method label cannot contain {SEPARATOR!r}.")
    return label


def append(ledger: Optional[str], method_label: str, amount: Number, symbol: str = DEFAULT_SYMBOL) -> str:
    entry = encode_entry(validate_label(method_label), amount, symbol)
    segments = split_entries(ledger)
    if not segments:
        return entry
    return join_entries([*segments, entry])


def remove_entry(ledger: Optional[str], index: int) -> str:
    segments = split_entries(ledger)
    if index < 0 or index >= len(segments):
        raise IndexOutOfBounds(f"No payment at index {index} (ledger has {len(segments)}).")
    del segments[index]
    return join_entries(segments)

# track_core/orders/summary.py
from __future__ import annotations

from typing import Iterable

UNSIZED = "UN"


def size_summary(items: Iterable) -> dict:
    """
    Quantity per size for the production sheet.

    Sizes are trimmed and upper-cased; blank sizes are counted under "UN".
    Accepts OrderItem rows or ItemInput drafts.
    """
    sizes: dict[str, int] = {}
    total = 0
    for item in items:
        size = (getattr(item, "size", "") or "").strip().upper() or UNSIZED
        qty = int(item.quantity)
        sizes[size] = sizes.get(size, 0) + qty
        total += qty
    return {"sizes": sizes, "total_items": total}

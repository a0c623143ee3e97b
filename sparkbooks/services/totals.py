"""Line-item aggregation and tax arithmetic for estimates and invoices.

Everything here is exact ``Decimal`` arithmetic; nothing is rounded.
Rounding to cents happens only when a value is displayed.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sparkbooks.models.job import JobItem

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return Decimal(quantity) * Decimal(unit_price)


def compute_subtotal(items: Iterable[JobItem]) -> Decimal:
    return sum((Decimal(item.total_price) for item in items), ZERO)


def compute_tax(subtotal: Decimal, tax_rate: Decimal) -> Decimal:
    return Decimal(subtotal) * Decimal(tax_rate) / HUNDRED


def compute_total(subtotal: Decimal, tax_amount: Decimal) -> Decimal:
    return Decimal(subtotal) + Decimal(tax_amount)


def document_totals(subtotal: Decimal, tax_rate: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(tax_amount, total_amount)`` for a subtotal and tax rate."""
    tax_amount = compute_tax(subtotal, tax_rate)
    return tax_amount, compute_total(subtotal, tax_amount)


def apply_totals(patch: dict[str, Any]) -> dict[str, Any]:
    """Add derived amounts to an update patch.

    Only a patch carrying both ``subtotal`` and ``tax_rate`` is recalculated.
    A patch with just one of them is returned unchanged, and the stored
    tax_amount/total_amount keep their previous values.
    """
    result = dict(patch)
    if result.get("subtotal") is not None and result.get("tax_rate") is not None:
        tax_amount, total_amount = document_totals(result["subtotal"], result["tax_rate"])
        result["tax_amount"] = tax_amount
        result["total_amount"] = total_amount
    return result

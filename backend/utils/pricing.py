# backend/utils/pricing.py
"""Monetary totals of a proposal.

VAT is applied per position, so a document may mix rates. Sums use
math.fsum, which is exactly rounded and therefore independent of the order
groups and positions are visited in.
"""
import math
from typing import Any, Mapping

from schemas.proposal import DocumentTotals, GroupTotals, PositionTotals


def _field(item: Any, name: str) -> Any:
    # Works for ORM rows, pydantic schemas and plain JSON dicts alike
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _amount(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def compute_position(position: Any) -> PositionTotals:
    line_subtotal = _amount(_field(position, "unit_price")) * _amount(_field(position, "quantity"))
    line_discount = line_subtotal * _amount(_field(position, "discount_percent")) / 100
    taxable_base = line_subtotal - line_discount
    vat_amount = taxable_base * _amount(_field(position, "vat_percent")) / 100
    return PositionTotals(
        line_subtotal=line_subtotal,
        line_discount=line_discount,
        taxable_base=taxable_base,
        vat_amount=vat_amount,
        total=taxable_base + vat_amount,
    )


def _roll_up(items) -> dict:
    subtotal = math.fsum(i.line_subtotal if isinstance(i, PositionTotals) else i.subtotal for i in items)
    discount = math.fsum(i.line_discount if isinstance(i, PositionTotals) else i.discount for i in items)
    vat_amount = math.fsum(i.vat_amount for i in items)
    return {
        "subtotal": subtotal,
        "discount": discount,
        "vat_amount": vat_amount,
        "total": math.fsum((subtotal, -discount, vat_amount)),
    }


def recompute_totals(document: Any) -> DocumentTotals:
    """Totals of every position, group and of the whole document. Pure, the input is not touched."""
    if document is None:
        raise TypeError("document is required")

    groups = []
    all_positions = []
    for group in _field(document, "groups") or []:
        positions = [compute_position(p) for p in _field(group, "positions") or []]
        all_positions.extend(positions)
        groups.append(GroupTotals(positions=positions, **_roll_up(positions)))

    # Document sums go straight over positions so grouping cannot change them
    return DocumentTotals(groups=groups, **_roll_up(all_positions))


def set_group_vat(document, group_index: int, vat_percent: float):
    """Copy of a ProposalCreate-like document with one VAT rate on every position of one group."""
    groups = list(document.groups)
    group = groups[group_index]
    positions = [p.model_copy(update={"vat_percent": vat_percent}) for p in group.positions]
    groups[group_index] = group.model_copy(update={"positions": positions})
    return document.model_copy(update={"groups": groups})

import copy
import itertools
import random

import pytest

from schemas.proposal import ProposalCreate
from utils.pricing import compute_position, recompute_totals, set_group_vat


def _position(unit_price, quantity=1, discount_percent=0, vat_percent=0):
    return {
        "unit_price": unit_price,
        "quantity": quantity,
        "discount_percent": discount_percent,
        "vat_percent": vat_percent,
    }


def test_position_totals():
    line = compute_position(_position(150, 2, 10, 22))
    assert line.line_subtotal == pytest.approx(300)
    assert line.line_discount == pytest.approx(30)
    assert line.taxable_base == pytest.approx(270)
    assert line.vat_amount == pytest.approx(59.4)
    assert line.total == pytest.approx(329.4)


def test_mixed_vat_rates_are_summed_per_position():
    document = {"groups": [{"positions": [_position(100, vat_percent=22), _position(100, vat_percent=10)]}]}
    totals = recompute_totals(document)

    assert totals.vat_amount == pytest.approx(32)
    assert totals.vat_amount != pytest.approx(200 * 0.22)
    assert totals.total == pytest.approx(232)


def test_group_and_document_totals():
    document = {"groups": [
        {"positions": [_position(150, 2, 10, 22)]},
        {"positions": [_position(50, 4, 0, 10), _position(10, 1, 50, 0)]},
    ]}
    totals = recompute_totals(document)

    assert [g.total for g in totals.groups] == pytest.approx([329.4, 225])
    assert totals.subtotal == pytest.approx(510)
    assert totals.discount == pytest.approx(35)
    assert totals.vat_amount == pytest.approx(79.4)
    assert totals.total == pytest.approx(totals.subtotal - totals.discount + totals.vat_amount)
    assert totals.total == pytest.approx(sum(g.total for g in totals.groups))


def test_totals_do_not_depend_on_position_order():
    rng = random.Random(7)
    positions = [
        _position(rng.uniform(0.01, 999.99), rng.randint(1, 25), rng.choice([0, 5, 12.5]), rng.choice([0, 10, 22]))
        for _ in range(6)
    ]
    reference = recompute_totals({"groups": [{"positions": positions}]})

    for permutation in itertools.islice(itertools.permutations(positions), 200):
        split = rng.randint(0, len(permutation))
        document = {"groups": [{"positions": list(permutation[:split])}, {"positions": list(permutation[split:])}]}
        totals = recompute_totals(document)
        for field in ("subtotal", "discount", "vat_amount", "total"):
            assert getattr(totals, field) == pytest.approx(getattr(reference, field), abs=1e-9)


def test_empty_document_totals_are_zero():
    for document in ({"groups": []}, {"groups": [{"positions": []}]}, {}):
        totals = recompute_totals(document)
        assert (totals.subtotal, totals.discount, totals.vat_amount, totals.total) == (0, 0, 0, 0)


def test_missing_document_raises():
    with pytest.raises(TypeError):
        recompute_totals(None)


def test_recompute_does_not_touch_the_document():
    document = {"groups": [{"positions": [_position(150, 2, 10, 22)]}]}
    snapshot = copy.deepcopy(document)
    recompute_totals(document)
    assert document == snapshot


def test_garbage_amounts_count_as_zero():
    line = compute_position({"unit_price": "abc", "quantity": None, "discount_percent": float("nan")})
    assert line.total == 0


def test_set_group_vat_returns_a_copy():
    document = ProposalCreate(client_name="ACME", groups=[
        {"name": "Doors", "positions": [
            {"category_id": 1, "supplier_category_id": 1, "unit_price": 100, "vat_percent": 22},
            {"category_id": 1, "supplier_category_id": 1, "unit_price": 100, "vat_percent": 4},
        ]},
        {"name": "Windows", "positions": [
            {"category_id": 2, "supplier_category_id": 2, "unit_price": 100, "vat_percent": 22},
        ]},
    ])
    updated = set_group_vat(document, 0, 10)

    assert [p.vat_percent for p in updated.groups[0].positions] == [10, 10]
    assert [p.vat_percent for p in updated.groups[1].positions] == [22]
    assert [p.vat_percent for p in document.groups[0].positions] == [22, 4]
    assert recompute_totals(updated).vat_amount == pytest.approx(42)

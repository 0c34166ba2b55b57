import pytest
from ordering.order.order import Order
from protean.exceptions import ValidationError

LINES = [
    {"draft_id": "d-1", "design_id": "rose-vine", "quantity": 2, "unit_price": 232500, "line_total": 465000},
    {"draft_id": "d-2", "design_id": "peacock", "quantity": 1, "unit_price": 500000, "line_total": 500000},
]


def place(**overrides):
    kwargs = dict(
        user_id="user-1",
        lines=LINES,
        subtotal=965000,
        payment_reference="txn-1",
        idempotency_key="key-1",
    )
    kwargs.update(overrides)
    return Order.place(**kwargs)


def test_place_records_totals():
    order = place(delivery=5000)

    assert order.subtotal == 965000
    assert order.total == 970000
    assert order.currency == "INR"


def test_order_number_is_derived_from_the_id():
    order = place()

    assert order.order_number == str(order.id)[:8].upper()


def test_lines_and_drafts_are_snapshotted():
    order = place()

    assert order.submitted_draft_ids == ["d-1", "d-2"]
    assert order.line_items == LINES


def test_an_order_needs_lines():
    with pytest.raises(ValidationError) as exc:
        place(lines=[])
    assert "lines" in exc.value.messages


def test_total_must_match_subtotal_plus_delivery():
    with pytest.raises(ValidationError):
        Order(
            order_number="ABC",
            user_id="user-1",
            draft_ids="[]",
            lines="[]",
            subtotal=100,
            delivery=0,
            total=90,
        )

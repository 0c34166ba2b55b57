"""Placing an order from the signed-in shopper's bag."""

import pytest
from ordering.checkout.checkout import idempotency_key_for
from ordering.errors import AuthenticationRequired, PaymentDeclined, RemoteUnavailable
from ordering.shared.money import Money
from protean.exceptions import ValidationError


@pytest.fixture()
def filled_bag(session, cloth_selections, stitched_selections):
    reconciler = session.reconciler
    return [
        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections, quantity=2),
        reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections),
    ]


@pytest.fixture()
def signed_in(session, filled_bag):
    session.sign_in("user-1")
    return session


class TestSummary:
    def test_summary_sums_fresh_line_totals(self, session, filled_bag):
        summary = session.checkout.summarize()

        assert summary.subtotal == Money.of(9650)
        assert summary.delivery == Money.zero()
        assert summary.total == Money.of(9650)
        assert sorted(summary.draft_ids) == sorted(str(d.id) for d in filled_bag)

    def test_empty_bag(self, session):
        assert session.checkout.summarize().is_empty


class TestPlaceOrder:
    def test_guests_must_sign_in(self, session, filled_bag):
        with pytest.raises(AuthenticationRequired):
            session.checkout.place_order()

        assert session.checkout.gateway.calls == []

    def test_empty_bag_is_rejected(self, session):
        session.sign_in("user-1")

        with pytest.raises(ValidationError) as exc:
            session.checkout.place_order()
        assert "bag" in exc.value.messages

    def test_successful_order(self, signed_in, filled_bag):
        order = signed_in.checkout.place_order("upi")

        assert order.total == Money.of(9650).paise
        assert order.user_id == "user-1"
        assert order.order_number == str(order.id)[:8].upper()
        assert sorted(order.submitted_draft_ids) == sorted(str(d.id) for d in filled_bag)
        assert order.payment_reference.startswith("fake_txn_")

        [call] = signed_in.checkout.gateway.calls
        assert call["amount_paise"] == 965000
        assert call["currency"] == "INR"
        assert call["payment_method"] == "upi"

    def test_order_empties_the_bag(self, signed_in):
        signed_in.checkout.place_order()

        assert signed_in.reconciler.list_drafts() == []
        assert signed_in.reconciler.bag_count == 0

    def test_lines_snapshot_the_prices_charged(self, signed_in, catalog):
        order = signed_in.checkout.place_order()
        catalog.add_fabric("silk", "Silk", 900)

        totals = sorted(line["line_total"] for line in order.line_items)
        assert totals == [Money.of(4650).paise, Money.of(5000).paise]

    def test_declined_payment_leaves_the_bag_alone(self, signed_in):
        signed_in.checkout.gateway.configure(should_succeed=False, failure_reason="Insufficient funds")

        with pytest.raises(PaymentDeclined, match="Insufficient funds"):
            signed_in.checkout.place_order()

        assert signed_in.reconciler.bag_count == 3
        assert signed_in.checkout.orders() == []

    def test_retry_after_interrupted_submission_charges_once(self, signed_in):
        remote = signed_in.reconciler.remote_store
        remote.configure(fail_operations={"put"})

        with pytest.raises(RemoteUnavailable):
            signed_in.checkout.place_order()
        assert signed_in.reconciler.bag_count == 3

        remote.configure(should_succeed=True)
        order = signed_in.checkout.place_order()

        assert len(signed_in.checkout.gateway.calls) == 1
        assert signed_in.reconciler.list_drafts() == []
        assert [o.id for o in signed_in.checkout.orders()] == [order.id]


class TestOrders:
    def test_orders_are_per_user(self, signed_in, make_session):
        signed_in.checkout.place_order()

        other = make_session("device-2")
        other.sign_in("user-2")
        assert other.checkout.orders() == []
        assert len(signed_in.checkout.orders()) == 1


def test_idempotency_key_ignores_line_order():
    assert idempotency_key_for("user-1", ["a", "b"]) == idempotency_key_for("user-1", ["b", "a"])
    assert idempotency_key_for("user-1", ["a"]) != idempotency_key_for("user-2", ["a"])

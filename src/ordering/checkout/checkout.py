"""Checkout: turn the open bag into a paid order.

The bag is priced afresh, charged once through the payment gateway, recorded
as an ``Order`` and then flipped to ``Submitted`` through the reconciler. A
declined payment leaves the bag untouched.
"""

import hashlib
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from identity.resolver import IdentityResolver
from ordering.checkout.gateway import get_gateway
from ordering.checkout.gateway.port import PaymentGateway
from ordering.errors import AuthenticationRequired, PaymentDeclined
from ordering.order.order import Order
from ordering.reconciler.reconciler import DraftReconciler
from ordering.reconciler.results import PricedDraft
from ordering.settings import get_settings
from ordering.shared.money import Money
from ordering.stores.remote_adapter import remote_call

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderLine:
    draft_id: str
    design_id: str
    service_type: str
    quantity: int
    unit_price: Money
    line_total: Money
    components: dict[str, int]

    @classmethod
    def from_priced(cls, priced: PricedDraft) -> "OrderLine":
        return cls(
            draft_id=priced.id,
            design_id=priced.draft.design_id,
            service_type=priced.draft.service_type,
            quantity=priced.quantity,
            unit_price=priced.unit_price,
            line_total=priced.line_total,
            components=priced.breakdown.as_dict(),
        )

    def snapshot(self) -> dict:
        return {
            "draft_id": self.draft_id,
            "design_id": self.design_id,
            "service_type": self.service_type,
            "quantity": self.quantity,
            "unit_price": self.unit_price.paise,
            "line_total": self.line_total.paise,
            "components": self.components,
        }


@dataclass(frozen=True)
class OrderSummary:
    lines: tuple[OrderLine, ...]
    subtotal: Money
    delivery: Money
    total: Money

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def draft_ids(self) -> list[str]:
        return [line.draft_id for line in self.lines]


def idempotency_key_for(user_id: str, draft_ids) -> str:
    digest = hashlib.sha256("|".join([str(user_id), *sorted(draft_ids)]).encode("utf-8"))
    return digest.hexdigest()[:32]


class Checkout:
    def __init__(
        self,
        resolver: IdentityResolver,
        reconciler: DraftReconciler,
        gateway: PaymentGateway | None = None,
        currency: str | None = None,
    ) -> None:
        self.resolver = resolver
        self.reconciler = reconciler
        self._gateway = gateway
        self.currency = currency or get_settings().currency

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    def summarize(self) -> OrderSummary:
        lines = tuple(OrderLine.from_priced(priced) for priced in self.reconciler.list_drafts())
        subtotal = Money.sum_of(line.line_total for line in lines)
        delivery = Money.zero()
        return OrderSummary(lines=lines, subtotal=subtotal, delivery=delivery, total=subtotal + delivery)

    def place_order(self, payment_method: str = "card") -> Order:
        actor = self.resolver.current
        if not actor.is_authenticated:
            raise AuthenticationRequired("place an order")

        summary = self.summarize()
        if summary.is_empty:
            raise ValidationError({"bag": ["Your bag is empty"]})

        key = idempotency_key_for(actor.user_id, summary.draft_ids)
        existing = self._find_by_key(actor.user_id, key)
        if existing is not None:
            # A previous attempt was charged and recorded but not submitted
            self.reconciler.mark_submitted(existing.submitted_draft_ids, existing.id)
            return existing

        result = self.gateway.create_charge(summary.total.paise, self.currency, payment_method, key)
        if not result.success:
            logger.warning(
                "Payment declined",
                user_id=actor.user_id,
                amount_paise=summary.total.paise,
                reason=result.failure_reason,
            )
            raise PaymentDeclined(result.failure_reason or "unknown reason")

        order = Order.place(
            user_id=actor.user_id,
            lines=[line.snapshot() for line in summary.lines],
            subtotal=summary.subtotal.paise,
            delivery=summary.delivery.paise,
            payment_reference=result.gateway_transaction_id,
            idempotency_key=key,
            currency=self.currency,
        )
        with remote_call("record order", actor.scope):
            current_domain.repository_for(Order).add(order)

        self.reconciler.mark_submitted(summary.draft_ids, order.id)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=actor.user_id,
            total_paise=order.total,
            line_count=len(summary.lines),
        )
        return order

    def orders(self) -> list[Order]:
        """Orders of the signed-in shopper, newest first."""
        actor = self.resolver.current
        if not actor.is_authenticated:
            raise AuthenticationRequired("view orders")
        with remote_call("list orders", actor.scope):
            query = current_domain.repository_for(Order)._dao.query.filter(user_id=actor.user_id)
            orders = query.limit(None).all().items
        return sorted(orders, key=lambda o: o.placed_at, reverse=True)

    def _find_by_key(self, user_id: str, key: str) -> Order | None:
        with remote_call("look up order", self.resolver.current.scope):
            matches = (
                current_domain.repository_for(Order)._dao.query.filter(user_id=user_id, idempotency_key=key).all().items
            )
        return matches[0] if matches else None

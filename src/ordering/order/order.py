"""Order aggregate: the append-only record of a placed bag.

An order snapshots the priced lines at the moment of payment. The drafts it
was built from are flipped to ``Submitted`` and never change again.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String, Text

from ordering.domain import ordering


@ordering.aggregate
class Order:
    order_number = String(max_length=8, required=True)
    user_id = String(max_length=255, required=True)
    draft_ids = Text(required=True)  # JSON array of draft ids
    lines = Text(required=True)  # JSON snapshot of the priced lines
    subtotal = Integer(min_value=0, required=True)  # paise
    delivery = Integer(min_value=0, default=0)  # paise
    total = Integer(min_value=0, required=True)  # paise
    currency = String(max_length=3, default="INR")
    payment_reference = String(max_length=255)
    idempotency_key = String(max_length=64)
    placed_at = DateTime()

    @invariant.post
    def total_must_equal_subtotal_plus_delivery(self):
        if self.total != self.subtotal + (self.delivery or 0):
            raise ValidationError({"total": ["Order total must equal subtotal plus delivery"]})

    @classmethod
    def place(cls, user_id, lines: list[dict], subtotal: int, payment_reference, idempotency_key, delivery=0, currency="INR"):
        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        order_id = str(uuid4())
        return cls(
            id=order_id,
            order_number=order_id[:8].upper(),
            user_id=str(user_id),
            draft_ids=json.dumps([line["draft_id"] for line in lines]),
            lines=json.dumps(lines),
            subtotal=subtotal,
            delivery=delivery,
            total=subtotal + delivery,
            currency=currency,
            payment_reference=payment_reference,
            idempotency_key=idempotency_key,
            placed_at=datetime.now(UTC),
        )

    @property
    def submitted_draft_ids(self) -> list[str]:
        return json.loads(self.draft_ids)

    @property
    def line_items(self) -> list[dict]:
        return json.loads(self.lines)

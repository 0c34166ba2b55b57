"""Draft aggregate: one customization in progress, or one line in the bag.

A draft is owned by exactly one scope. Anonymous drafts live in device
storage; user drafts live in the remote document store. The owner changes
once, when a guest signs in and the draft is migrated.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from identity.actor import OwnerKind, OwnerScope
from ordering.domain import ordering
from ordering.draft.selections import Selections, ServiceType
from ordering.errors import DraftSubmitted, InvalidQuantity


class DraftStatus(Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"


# Persisted attributes, in storage order
DRAFT_FIELDS = (
    "id",
    "owner_kind",
    "owner_id",
    "service_type",
    "design_id",
    "fabric_id",
    "color_id",
    "length_m",
    "garment_id",
    "standard_size_id",
    "custom_measurements",
    "fabric_details",
    "pickup_address_id",
    "quantity",
    "estimated_price",
    "status",
    "order_id",
    "created_at",
    "updated_at",
)


def _dumps(value: dict | None) -> str | None:
    return json.dumps(value, sort_keys=True) if value else None


def _loads(value: str | None) -> dict | None:
    return json.loads(value) if value else None


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity)
    return quantity


@ordering.aggregate
class Draft:
    owner_kind = String(choices=OwnerKind, required=True)
    owner_id = String(max_length=255, required=True)
    service_type = String(choices=ServiceType, required=True)
    design_id = String(max_length=255, required=True)

    # Selections
    fabric_id = String(max_length=255)
    color_id = String(max_length=255)
    length_m = Float(min_value=0.0)
    garment_id = String(max_length=255)
    standard_size_id = String(max_length=50)
    custom_measurements = Text()  # JSON object
    fabric_details = Text()  # JSON object: fabric_type, color, length, notes
    pickup_address_id = String(max_length=255)

    quantity = Integer(min_value=1, default=1)
    estimated_price = Integer(min_value=0, default=0)  # unit price in paise
    status = String(choices=DraftStatus, default=DraftStatus.DRAFT.value)
    order_id = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def submitted_draft_must_reference_order(self):
        if self.status == DraftStatus.SUBMITTED.value and not self.order_id:
            raise ValidationError({"order_id": ["A submitted draft must reference its order"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, scope: OwnerScope, service_type, design_id, selections: Selections, estimated_price: int, quantity=1):
        validate_quantity(quantity)
        now = datetime.now(UTC)
        return cls(
            owner_kind=scope.kind.value,
            owner_id=scope.owner_id,
            service_type=ServiceType(service_type).value,
            design_id=design_id,
            quantity=quantity,
            estimated_price=estimated_price,
            status=DraftStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
            **cls._selection_attributes(selections),
        )

    @classmethod
    def from_record(cls, record: dict) -> "Draft":
        return cls(**{name: record[name] for name in DRAFT_FIELDS if record.get(name) is not None})

    def to_record(self) -> dict:
        return {name: getattr(self, name) for name in DRAFT_FIELDS}

    def copy(self, fresh_identity: bool = False) -> "Draft":
        record = self.to_record()
        if fresh_identity:
            del record["id"]
        return Draft.from_record(record)

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    @property
    def scope(self) -> OwnerScope:
        return OwnerScope(OwnerKind(self.owner_kind), self.owner_id)

    @property
    def is_submitted(self) -> bool:
        return self.status == DraftStatus.SUBMITTED.value

    @property
    def selections(self) -> Selections:
        return Selections(
            fabric_id=self.fabric_id,
            color_id=self.color_id,
            length_m=Decimal(str(self.length_m)) if self.length_m is not None else None,
            garment_id=self.garment_id,
            standard_size_id=self.standard_size_id,
            custom_measurements=_loads(self.custom_measurements),
            fabric_details=_loads(self.fabric_details),
            pickup_address_id=self.pickup_address_id,
        )

    def content_key(self) -> tuple:
        """Identity of the customization, ignoring quantity, price and ownership.

        Two drafts are the same line only when every selection matches.
        """
        length = Decimal(str(self.length_m)).normalize() if self.length_m is not None else None
        return (
            self.service_type,
            self.design_id,
            self.fabric_id,
            self.color_id,
            length,
            self.garment_id,
            self.standard_size_id,
            self.custom_measurements,
            self.fabric_details,
            self.pickup_address_id,
        )

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _ensure_editable(self):
        if self.is_submitted:
            raise DraftSubmitted(self.id)

    def apply_selections(self, selections: Selections, estimated_price: int):
        """Replace every selection and the cached price together."""
        self._ensure_editable()
        with atomic_change(self):
            for name, value in self._selection_attributes(selections).items():
                setattr(self, name, value)
            self.estimated_price = estimated_price
            self.updated_at = datetime.now(UTC)

    def reprice(self, estimated_price: int):
        self._ensure_editable()
        self.estimated_price = estimated_price

    def change_quantity(self, quantity):
        self._ensure_editable()
        validate_quantity(quantity)
        with atomic_change(self):
            self.quantity = quantity
            self.updated_at = datetime.now(UTC)

    def submit(self, order_id: str):
        self._ensure_editable()
        with atomic_change(self):
            self.status = DraftStatus.SUBMITTED.value
            self.order_id = str(order_id)
            self.updated_at = datetime.now(UTC)

    def replace_with(self, other: "Draft"):
        """Overwrite this stored record with another version of the same draft."""
        self._ensure_editable()
        with atomic_change(self):
            for name in DRAFT_FIELDS[1:]:
                setattr(self, name, getattr(other, name))

    def reassign_to(self, scope: OwnerScope, estimated_price: int):
        """Move an anonymous draft into the authenticating user's scope."""
        self._ensure_editable()
        if self.owner_kind != OwnerKind.ANONYMOUS.value or scope.is_anonymous:
            raise ValidationError({"owner": ["Drafts can only move from an anonymous scope to a user scope"]})
        with atomic_change(self):
            self.owner_kind = scope.kind.value
            self.owner_id = scope.owner_id
            self.estimated_price = estimated_price
            self.updated_at = datetime.now(UTC)

    @staticmethod
    def _selection_attributes(selections: Selections) -> dict:
        return {
            "fabric_id": selections.fabric_id,
            "color_id": selections.color_id,
            "length_m": float(selections.length_m) if selections.length_m is not None else None,
            "garment_id": selections.garment_id,
            "standard_size_id": selections.standard_size_id,
            "custom_measurements": _dumps(selections.custom_measurements),
            "fabric_details": _dumps(selections.fabric_details),
            "pickup_address_id": selections.pickup_address_id,
        }

"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the domain aggregates.
Amounts are integer paise.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Bag
# ---------------------------------------------------------------------------
class SelectionsSchema(BaseModel):
    fabric_id: str | None = None
    color_id: str | None = None
    length_m: float | None = None
    garment_id: str | None = None
    standard_size_id: str | None = None
    custom_measurements: dict[str, float] | None = None
    fabric_details: dict[str, str] | None = None
    pickup_address_id: str | None = None


class AddDraftRequest(BaseModel):
    service_type: str
    design_id: str
    selections: SelectionsSchema
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "service_type": "ClothOnly",
                    "design_id": "classic-rose-vine",
                    "selections": {"fabric_id": "raw-silk", "color_id": "ivory", "length_m": 2.5},
                    "quantity": 1,
                }
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    quantity: int


class CostComponentSchema(BaseModel):
    name: str
    amount_paise: int


class DraftResponse(BaseModel):
    draft_id: str
    service_type: str
    design_id: str
    selections: SelectionsSchema
    quantity: int
    status: str
    unit_price_paise: int
    line_total_paise: int | None = None
    components: list[CostComponentSchema] = Field(default_factory=list)


class BagResponse(BaseModel):
    drafts: list[DraftResponse]
    count: int


class BagCountResponse(BaseModel):
    count: int


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------
class WishlistResponse(BaseModel):
    design_ids: list[str]


class ToggleResponse(BaseModel):
    design_id: str
    liked: bool


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class SignInRequest(BaseModel):
    user_id: str
    restored: bool = False


class SessionResponse(BaseModel):
    device_id: str
    authenticated: bool
    user_id: str | None = None
    migration_pending: bool = False
    migration_error: str | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    payment_method: str = "card"


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    draft_ids: list[str]
    subtotal_paise: int
    delivery_paise: int
    total_paise: int
    payment_reference: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str

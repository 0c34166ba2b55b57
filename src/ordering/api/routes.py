"""FastAPI routes for the storefront: bag, wishlist, session and checkout.

The shopper's device is identified by the ``X-Device-Id`` header; every
request is served by that device's ``ShopperSession``.
"""

import os
from contextlib import contextmanager

from fastapi import APIRouter, Depends, Header, HTTPException
from protean.exceptions import ObjectNotFoundError, ValidationError

from catalogue.port import CatalogEntryNotFound
from ordering.api.schemas import (
    AddDraftRequest,
    BagCountResponse,
    BagResponse,
    CheckoutRequest,
    ConfigureGatewayRequest,
    CostComponentSchema,
    DraftResponse,
    GatewayConfigResponse,
    OrderListResponse,
    OrderResponse,
    SelectionsSchema,
    SessionResponse,
    SignInRequest,
    ToggleResponse,
    UpdateQuantityRequest,
    WishlistResponse,
)
from ordering.checkout.gateway import get_gateway
from ordering.checkout.gateway.fake_adapter import FakeGateway
from ordering.errors import (
    AuthenticationRequired,
    DraftIdTaken,
    PaymentDeclined,
    PersistenceError,
    RemoteUnavailable,
)
from ordering.pricing.engine import price_draft
from ordering.session import ShopperSession, get_registry


def current_session(x_device_id: str = Header(min_length=1)) -> ShopperSession:
    return get_registry().get(x_device_id)


@contextmanager
def domain_errors():
    """Translate domain failures into HTTP errors."""
    try:
        yield
    except AuthenticationRequired as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except PaymentDeclined as exc:
        raise HTTPException(status_code=402, detail=str(exc)) from exc
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.messages) from exc
    except CatalogEntryNotFound as exc:
        # A bag line points at a design, fabric or size withdrawn from the catalog
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except DraftIdTaken as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=507, detail=exc.message) from exc
    except RemoteUnavailable as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc


def _draft_response(draft, breakdown) -> DraftResponse:
    selections = draft.selections.to_dict()
    if selections["length_m"] is not None:
        selections["length_m"] = float(selections["length_m"])
    return DraftResponse(
        draft_id=str(draft.id),
        service_type=draft.service_type,
        design_id=draft.design_id,
        selections=SelectionsSchema(**selections),
        quantity=draft.quantity,
        status=draft.status,
        unit_price_paise=breakdown.total.paise,
        line_total_paise=breakdown.total.times(draft.quantity).paise,
        components=[CostComponentSchema(name=c.name.value, amount_paise=c.amount.paise) for c in breakdown.components],
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        draft_ids=order.submitted_draft_ids,
        subtotal_paise=order.subtotal,
        delivery_paise=order.delivery,
        total_paise=order.total,
        payment_reference=order.payment_reference,
    )


def _session_response(session: ShopperSession) -> SessionResponse:
    actor = session.actor
    failure = session.migration.last_failure
    return SessionResponse(
        device_id=session.device_id,
        authenticated=actor.is_authenticated,
        user_id=actor.user_id if actor.is_authenticated else None,
        migration_pending=failure is not None,
        migration_error=str(failure) if failure else None,
    )


# ---------------------------------------------------------------------------
# Bag Router
# ---------------------------------------------------------------------------
bag_router = APIRouter(prefix="/bag", tags=["bag"])


@bag_router.get("", response_model=BagResponse)
async def list_bag(session: ShopperSession = Depends(current_session)) -> BagResponse:
    with domain_errors():
        priced = session.reconciler.list_drafts()
    return BagResponse(
        drafts=[_draft_response(p.draft, p.breakdown) for p in priced],
        count=sum(p.quantity for p in priced),
    )


@bag_router.get("/count", response_model=BagCountResponse)
async def bag_count(session: ShopperSession = Depends(current_session)) -> BagCountResponse:
    with domain_errors():
        return BagCountResponse(count=session.reconciler.bag_count)


@bag_router.post("/drafts", status_code=201, response_model=DraftResponse)
async def add_draft(body: AddDraftRequest, session: ShopperSession = Depends(current_session)) -> DraftResponse:
    with domain_errors():
        draft = session.reconciler.add_draft(
            body.service_type,
            body.design_id,
            body.selections.model_dump(exclude_none=True),
            quantity=body.quantity,
        )
        breakdown = price_draft(draft, session.catalog, session.reconciler.stitching_fee)
    return _draft_response(draft, breakdown)


@bag_router.put("/drafts/{draft_id}/quantity", response_model=BagCountResponse)
async def update_quantity(
    draft_id: str, body: UpdateQuantityRequest, session: ShopperSession = Depends(current_session)
) -> BagCountResponse:
    with domain_errors():
        session.reconciler.update_quantity(draft_id, body.quantity)
        return BagCountResponse(count=session.reconciler.bag_count)


@bag_router.put("/drafts/{draft_id}/selections", response_model=DraftResponse)
async def update_selections(
    draft_id: str, body: SelectionsSchema, session: ShopperSession = Depends(current_session)
) -> DraftResponse:
    with domain_errors():
        draft = session.reconciler.update_selections(draft_id, body.model_dump(exclude_unset=True))
        breakdown = price_draft(draft, session.catalog, session.reconciler.stitching_fee)
    return _draft_response(draft, breakdown)


@bag_router.delete("/drafts/{draft_id}", response_model=BagCountResponse)
async def remove_draft(draft_id: str, session: ShopperSession = Depends(current_session)) -> BagCountResponse:
    with domain_errors():
        session.reconciler.remove_draft(draft_id)
        return BagCountResponse(count=session.reconciler.bag_count)


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@wishlist_router.get("", response_model=WishlistResponse)
async def list_wishlist(session: ShopperSession = Depends(current_session)) -> WishlistResponse:
    with domain_errors():
        return WishlistResponse(design_ids=session.wishlist.list())


@wishlist_router.post("/{design_id}/toggle", response_model=ToggleResponse)
async def toggle_wishlist(design_id: str, session: ShopperSession = Depends(current_session)) -> ToggleResponse:
    with domain_errors():
        liked = session.wishlist.toggle(design_id)
    return ToggleResponse(design_id=design_id, liked=liked)


# ---------------------------------------------------------------------------
# Session Router
# ---------------------------------------------------------------------------
session_router = APIRouter(prefix="/session", tags=["session"])


@session_router.post("/sign-in", response_model=SessionResponse)
async def sign_in(body: SignInRequest, session: ShopperSession = Depends(current_session)) -> SessionResponse:
    with domain_errors():
        if body.restored:
            session.restore(body.user_id)
        else:
            session.sign_in(body.user_id)
    return _session_response(session)


@session_router.post("/sign-out", response_model=SessionResponse)
async def sign_out(session: ShopperSession = Depends(current_session)) -> SessionResponse:
    session.sign_out()
    return _session_response(session)


@session_router.post("/migration/retry", response_model=SessionResponse)
async def retry_migration(session: ShopperSession = Depends(current_session)) -> SessionResponse:
    with domain_errors():
        session.migration.retry()
    return _session_response(session)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(tags=["checkout"])


@checkout_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, session: ShopperSession = Depends(current_session)) -> OrderResponse:
    with domain_errors():
        order = session.checkout.place_order(body.payment_method)
    return _order_response(order)


@checkout_router.get("/orders", response_model=OrderListResponse)
async def list_orders(session: ShopperSession = Depends(current_session)) -> OrderListResponse:
    with domain_errors():
        orders = session.checkout.orders()
    return OrderListResponse(orders=[_order_response(order) for order in orders])


@checkout_router.post("/checkout/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )

"""Billing routes — Stripe customer, checkout and portal creation."""

from typing import TypeVar

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ValidationError

from billing_sync.constants import OPERATION_CUSTOMERS
from billing_sync.errors import InvalidRequest
from billing_sync.routers.deps import require_configured
from billing_sync.schemas.billing import (
    CheckoutSessionResponse,
    CreateCheckoutSessionRequest,
    CreateCustomerRequest,
    CreateCustomerResponse,
    CreatePortalSessionRequest,
    PortalSessionResponse,
)
from billing_sync.services import billing_service

router = APIRouter(
    tags=["billing"],
    dependencies=[Depends(require_configured(OPERATION_CUSTOMERS))],
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


async def _read_body(request: Request, model: type[RequestModel]) -> RequestModel:
    """Parse the JSON body into ``model``, mapping any malformed input to InvalidRequest."""
    try:
        data = await request.json()
    except ValueError:
        raise InvalidRequest("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidRequest(f"Invalid value for: {fields}")


@router.post("/create-customer", response_model=CreateCustomerResponse)
async def create_customer(request: Request):
    body = await _read_body(request, CreateCustomerRequest)
    return await billing_service.create_customer(body.email)


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(request: Request):
    body = await _read_body(request, CreateCheckoutSessionRequest)
    return await billing_service.create_checkout_session(body.price_id, body.customer_id)


@router.post("/create-portal-session", response_model=PortalSessionResponse)
async def create_portal_session(request: Request):
    body = await _read_body(request, CreatePortalSessionRequest)
    return await billing_service.create_portal_session(body.customer_id)

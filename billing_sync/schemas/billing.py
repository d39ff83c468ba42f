"""Request/response schemas for the outbound billing routes."""

from pydantic import BaseModel, ConfigDict, Field


class CreateCustomerRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None


class CreateCustomerResponse(BaseModel):
    customer_id: str
    email: str | None = None


class CreateCheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    price_id: str | None = Field(default=None, alias="priceId")
    customer_id: str | None = Field(default=None, alias="customerId")


class CheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    url: str | None = None


class CreatePortalSessionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    customer_id: str | None = Field(default=None, alias="customerId")


class PortalSessionResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True

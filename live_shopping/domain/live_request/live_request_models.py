"""Live request domain models."""

from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from live_shopping.schemas import LiveVideoRequest, Product


class LiveRequestCreateParams(BaseModel):
    """Parameters for creating a live video request."""

    user_name: str = Field(min_length=1, description="Customer display name")
    user_email: EmailStr = Field(description="Customer email, also the provider external id")
    product: Product = Field(description="Product snapshot: id, title, image, ...")

    @field_validator("user_name", "user_email", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class SupportJoinResult(BaseModel):
    """Outcome of a support agent joining a request."""

    dyte_auth_token: str
    created: bool
    live_request: LiveVideoRequest


class UserTokenResult(BaseModel):
    dyte_auth_token: str
    live_request_id: int

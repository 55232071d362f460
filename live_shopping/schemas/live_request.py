"""Live video request row schema."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, field_validator

from .live_request_status import LiveRequestStatus


class Product(BaseModel):
    """Product snapshot taken when the request is created.

    Unknown keys (price, category, ...) are kept as-is.
    """

    id: int | str
    title: str
    image: str | None = None

    model_config = ConfigDict(extra="allow")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field may not be blank.")
        return v


class LiveVideoRequest(BaseModel):
    """One row of the ``live_video_requests`` table."""

    id: int
    user_email: str
    user_name: str
    user_dyte_participant_id: str
    dyte_meeting_id: str
    support_user_dyte_participant_id: str | None = None
    status: LiveRequestStatus = LiveRequestStatus.PENDING
    feedback: str = ""
    product: Product
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LiveVideoRequest":
        data = dict(record)
        product = data.get("product")
        if isinstance(product, (str, bytes)):
            data["product"] = orjson.loads(product)
        return cls.model_validate(data)

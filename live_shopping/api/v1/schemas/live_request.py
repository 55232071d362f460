from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from live_shopping.domain.live_request.live_request_models import LiveRequestCreateParams
from live_shopping.schemas import LiveRequestStatus, LiveVideoRequest


class CreateLiveRequestIn(LiveRequestCreateParams):
    """Body of POST /live-requests/."""


class FinishLiveRequestIn(BaseModel):
    feedback: str | None = Field(default=None, description="Free-form session feedback")


class LiveVideoRequestOut(BaseModel):
    id: int
    user_email: str
    user_name: str
    user_dyte_participant_id: str
    dyte_meeting_id: str
    support_user_dyte_participant_id: str | None = None
    status: LiveRequestStatus
    feedback: str
    product: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(use_enum_values=True)

    @classmethod
    def from_domain(cls, live_request: LiveVideoRequest) -> "LiveVideoRequestOut":
        return cls.model_validate(live_request.model_dump(mode="json"))


class LiveRequestTokenOut(BaseModel):
    dyte_auth_token: str

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CreateMeetingBody(BaseModel):
    """Body of ``POST /meetings``."""

    title: str = Field(..., description="Meeting title shown in the call UI")
    preferred_region: str = Field(..., description="Provider region the meeting is pinned to")
    record_on_start: bool = Field(default=False, description="Start recording on first join")


class AddParticipantBody(BaseModel):
    """Body of ``POST /meetings/{meeting_id}/participants``."""

    name: str = Field(..., description="Participant display name")
    preset_name: str = Field(..., description="Preset controlling the participant's role")
    custom_participant_id: str = Field(
        ..., description="Caller-supplied identifier, used by the provider to identify the user"
    )


class DyteMeeting(BaseModel):
    id: str = Field(..., description="Meeting ID")
    title: str | None = None
    status: str | None = None

    model_config = ConfigDict(extra="allow")


class DyteParticipant(BaseModel):
    id: str = Field(..., description="Participant ID")
    token: str = Field(..., description="Join token for the participant")
    name: str | None = None
    custom_participant_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("custom_participant_id", "client_specific_id"),
    )

    model_config = ConfigDict(extra="allow")


class DyteToken(BaseModel):
    token: str = Field(..., description="Fresh join token")

    model_config = ConfigDict(extra="allow")


class DyteEnvelope(BaseModel):
    """Response envelope wrapping every provider payload."""

    success: bool = True
    data: dict[str, Any] | None = None
    message: str | None = None

    model_config = ConfigDict(extra="allow")

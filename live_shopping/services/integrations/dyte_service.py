"""Dyte REST API client.

Thin wrapper around the three provider endpoints the live-shopping flow needs.
Every call is authenticated with the organization id and API key (HTTP basic
auth) and every response carries a ``{"success": ..., "data": {...}}``
envelope, which is unwrapped here.

Usage:
    dyte = DyteClient.from_config(get_app_environ_config())

    meeting = await dyte.create_meeting("Live shopping: Shoes", region="ap-south-1")
    participant = await dyte.add_participant(
        meeting.id,
        name="Alice",
        preset_name="group_call_participant",
        custom_participant_id="alice@example.com",
    )
    token = await dyte.refresh_participant_token(meeting.id, participant.id)

    await dyte.aclose()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from live_shopping.utils.app_errors import AppErrorCode, ProviderError

from .dyte_schemas import (
    AddParticipantBody,
    CreateMeetingBody,
    DyteEnvelope,
    DyteMeeting,
    DyteParticipant,
    DyteToken,
)

if TYPE_CHECKING:
    from live_shopping.app_config import AppEnvironConfig


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class DyteClient:
    """Conferencing provider adapter holding its own credentials and HTTP session."""

    def __init__(
        self,
        base_url: str,
        org_id: str | None,
        api_key: str | None,
        *,
        timeout: float = 30,
        demo_mode: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.org_id = org_id
        self.api_key = api_key
        self.timeout = timeout
        self.demo_mode = demo_mode
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, cfg: AppEnvironConfig) -> DyteClient:
        return cls(
            cfg.DYTE_BASE_URL,
            cfg.DYTE_ORG_ID,
            cfg.DYTE_API_KEY,
            timeout=cfg.DYTE_HTTP_TIMEOUT,
            demo_mode=cfg.DEMO_MODE,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http is not None:
            return self._http

        if not self.org_id or not self.api_key:
            logger.error("DYTE_ORG_ID or DYTE_API_KEY not configured")
            raise ProviderError(
                "Conferencing provider credentials must be configured. "
                "Set them in env.local or environment variables.",
                errcode=AppErrorCode.E_PROVIDER_NOT_CONFIGURED,
            )

        logger.debug(f"Creating Dyte HTTP client for base_url={self.base_url}")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth(self.org_id, self.api_key),
            timeout=self.timeout,
            transport=self._transport,
        )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _post(self, path: str, body: BaseModel | None = None) -> dict[str, Any]:
        client = self._get_http_client()
        payload = body.model_dump() if body is not None else None

        try:
            response = await client.post(path, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(
                f"Conferencing provider request POST {path} failed: {exc!r}"
            ) from exc

        if response.is_error:
            raise ProviderError(
                f"Conferencing provider returned HTTP {response.status_code} for POST {path}",
                provider_status=response.status_code,
                provider_body=_response_body(response),
            )

        try:
            envelope = DyteEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise ProviderError(
                f"Conferencing provider sent an unreadable response for POST {path}",
                provider_status=response.status_code,
                provider_body=response.text,
            ) from exc

        if not envelope.success or envelope.data is None:
            raise ProviderError(
                f"Conferencing provider reported failure for POST {path}: {envelope.message}",
                provider_status=response.status_code,
                provider_body=_response_body(response),
            )

        logger.debug(f"POST {path} response: {envelope.data}")
        return envelope.data

    async def create_meeting(
        self,
        title: str,
        region: str,
        record_on_start: bool = False,
    ) -> DyteMeeting:
        """Provision a new meeting room."""
        if self.demo_mode:
            logger.info("DyteClient DEMO_MODE=true: returning stubbed meeting")
            return DyteMeeting(id=f"demo-meeting-{uuid4().hex}", title=title)

        body = CreateMeetingBody(
            title=title,
            preferred_region=region,
            record_on_start=record_on_start,
        )
        data = await self._post("/meetings", body)
        return self._parse(DyteMeeting, data, "create_meeting")

    async def add_participant(
        self,
        meeting_id: str,
        name: str,
        preset_name: str,
        custom_participant_id: str,
    ) -> DyteParticipant:
        """Register a participant in a meeting and return its id and join token."""
        if self.demo_mode:
            logger.info("DyteClient DEMO_MODE=true: returning stubbed participant")
            participant_id = f"demo-participant-{uuid4().hex}"
            return DyteParticipant(
                id=participant_id,
                token=f"DEMO_DYTE_TOKEN::{meeting_id}::{participant_id}",
                name=name,
                custom_participant_id=custom_participant_id,
            )

        body = AddParticipantBody(
            name=name,
            preset_name=preset_name,
            custom_participant_id=custom_participant_id,
        )
        data = await self._post(f"/meetings/{meeting_id}/participants", body)
        return self._parse(DyteParticipant, data, "add_participant")

    async def refresh_participant_token(self, meeting_id: str, participant_id: str) -> DyteToken:
        """Issue a fresh join token for an already registered participant."""
        if self.demo_mode:
            logger.info("DyteClient DEMO_MODE=true: returning stubbed token")
            nonce = uuid4().hex[:8]
            return DyteToken(token=f"DEMO_DYTE_TOKEN::{meeting_id}::{participant_id}::{nonce}")

        data = await self._post(f"/meetings/{meeting_id}/participants/{participant_id}/token")
        return self._parse(DyteToken, data, "refresh_participant_token")

    @staticmethod
    def _parse(model: type[BaseModel], data: dict[str, Any], operation: str) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            logger.exception(f"Failed to validate {operation} response")
            raise ProviderError(
                f"Conferencing provider sent an unexpected {operation} payload",
                provider_body=data,
            ) from exc

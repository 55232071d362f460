"""
In-memory mock of the Dyte REST endpoints used by the backend.

This FastAPI app exposes pared-down versions of the provider routes so the
backend can run locally without reaching the real service:

* POST /v2/meetings
* POST /v2/meetings/{meeting_id}/participants
* POST /v2/meetings/{meeting_id}/participants/{participant_id}/token

Run with granian:
    granian --interface asgi --host 127.0.0.1 --port 18082 tools.mock_dyte:app

Then point DYTE_BASE_URL to http://127.0.0.1:18082/v2 (e.g. in env.local).
Any non-empty basic-auth credentials are accepted.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from loguru import logger
from pydantic import BaseModel

app = FastAPI(title="dyte mock", version="0.1.0")
security = HTTPBasic()

MEETINGS: dict[str, dict[str, Any]] = {}
PARTICIPANTS: dict[str, dict[str, Any]] = {}


class MeetingIn(BaseModel):
    title: str | None = None
    preferred_region: str | None = None
    record_on_start: bool = False


class ParticipantIn(BaseModel):
    name: str
    preset_name: str
    custom_participant_id: str


def require_org(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    if not credentials.username or not credentials.password:
        raise HTTPException(status_code=401, detail="Missing organization credentials")
    return credentials.username


def _new_token(participant_id: str) -> str:
    return f"mock-token-{participant_id}-{uuid4().hex[:12]}"


@app.get("/health")
async def health():
    return {"status": "ok", "service": "mock-dyte"}


@app.post("/v2/meetings", status_code=201)
async def create_meeting(body: MeetingIn, org_id: str = Depends(require_org)):
    meeting_id = str(uuid4())
    MEETINGS[meeting_id] = {"id": meeting_id, "status": "ACTIVE", **body.model_dump()}
    logger.info("org={} created meeting {} ({})", org_id, meeting_id, body.title)
    return {"success": True, "data": MEETINGS[meeting_id]}


@app.post("/v2/meetings/{meeting_id}/participants", status_code=201)
async def add_participant(
    meeting_id: str,
    body: ParticipantIn,
    org_id: str = Depends(require_org),
):
    if meeting_id not in MEETINGS:
        raise HTTPException(status_code=404, detail="Meeting not found")

    participant_id = str(uuid4())
    PARTICIPANTS[participant_id] = {
        "id": participant_id,
        "meeting_id": meeting_id,
        **body.model_dump(),
    }
    logger.info("org={} added {} to meeting {}", org_id, participant_id, meeting_id)
    return {
        "success": True,
        "data": {**PARTICIPANTS[participant_id], "token": _new_token(participant_id)},
    }


@app.post("/v2/meetings/{meeting_id}/participants/{participant_id}/token")
async def refresh_token(
    meeting_id: str,
    participant_id: str,
    org_id: str = Depends(require_org),
):
    participant = PARTICIPANTS.get(participant_id)
    if participant is None or participant["meeting_id"] != meeting_id:
        raise HTTPException(status_code=404, detail="Participant not found")

    logger.info("org={} refreshed token for {}", org_id, participant_id)
    return {"success": True, "data": {"token": _new_token(participant_id)}}

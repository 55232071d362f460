from fastapi import APIRouter, Body, Response, status

from live_shopping.api.v1.dependency import LiveRequestServiceDep
from live_shopping.api.v1.schemas.live_request import (
    CreateLiveRequestIn,
    FinishLiveRequestIn,
    LiveRequestTokenOut,
    LiveVideoRequestOut,
)

router = APIRouter(prefix="/live-requests", tags=["Live Requests"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_live_request(
    body: CreateLiveRequestIn,
    service: LiveRequestServiceDep,
) -> LiveVideoRequestOut:
    """Customer asks for a live video shopping session for a product."""
    result = await service.create_live_request(body)
    return LiveVideoRequestOut.from_domain(result)


@router.get("/")
async def list_live_requests(service: LiveRequestServiceDep) -> list[LiveVideoRequestOut]:
    """Support queue: requests still waiting for an agent."""
    pending = await service.list_pending()
    return [LiveVideoRequestOut.from_domain(item) for item in pending]


@router.get("/{request_id}/")
async def get_live_request(request_id: int, service: LiveRequestServiceDep) -> LiveVideoRequestOut:
    result = await service.get_live_request(request_id)
    return LiveVideoRequestOut.from_domain(result)


@router.post("/{request_id}/start/")
async def start_live_request(
    request_id: int,
    response: Response,
    service: LiveRequestServiceDep,
) -> LiveRequestTokenOut:
    """Support agent joins the meeting.

    201 when the agent's participant is created, 200 when an existing one rejoins.
    """
    result = await service.start(request_id)
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return LiveRequestTokenOut(dyte_auth_token=result.dyte_auth_token)


@router.get("/{request_id}/user-token/")
async def get_user_token(request_id: int, service: LiveRequestServiceDep) -> LiveRequestTokenOut:
    """Fresh join token for the customer who created the request."""
    result = await service.get_user_token(request_id)
    return LiveRequestTokenOut(dyte_auth_token=result.dyte_auth_token)


@router.post("/{request_id}/finish/")
async def finish_live_request(
    request_id: int,
    service: LiveRequestServiceDep,
    body: FinishLiveRequestIn | None = Body(default=None),
) -> LiveVideoRequestOut:
    result = await service.finish(request_id, feedback=body.feedback if body else None)
    return LiveVideoRequestOut.from_domain(result)

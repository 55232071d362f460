from typing import Annotated

from fastapi import Depends, Request

from live_shopping.domain.live_request.live_request_domain import LiveRequestService


def get_live_request_service(request: Request) -> LiveRequestService:
    """Service instance built in the application lifespan."""
    return request.app.state.live_request_service


LiveRequestServiceDep = Annotated[LiveRequestService, Depends(get_live_request_service)]

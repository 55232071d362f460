"""Tests for closing a live request."""

import pytest

from live_shopping.domain.live_request.live_request_domain import LiveRequestService
from live_shopping.domain.live_request.live_request_models import LiveRequestCreateParams
from live_shopping.schemas import LiveRequestStatus
from live_shopping.utils.app_errors import InvalidStateError, NotFoundError


@pytest.fixture
async def live_request(service: LiveRequestService):
    return await service.create_live_request(
        LiveRequestCreateParams(
            user_name="Alice",
            user_email="alice@x.com",
            product={"id": 1, "title": "Shoes"},
        )
    )


class TestFinish:
    async def test_active_to_done(self, service: LiveRequestService, live_request):
        await service.start(live_request.id)

        result = await service.finish(live_request.id, feedback="Bought the shoes")

        assert result.status == LiveRequestStatus.DONE
        assert result.feedback == "Bought the shoes"

    async def test_without_feedback_keeps_empty(self, service: LiveRequestService, live_request):
        await service.start(live_request.id)

        result = await service.finish(live_request.id)

        assert result.feedback == ""

    async def test_pending_cannot_finish(self, service: LiveRequestService, live_request):
        with pytest.raises(InvalidStateError) as exc_info:
            await service.finish(live_request.id)

        assert exc_info.value.status_code == 409

    async def test_done_is_terminal(self, service: LiveRequestService, live_request):
        await service.start(live_request.id)
        await service.finish(live_request.id)

        with pytest.raises(InvalidStateError):
            await service.finish(live_request.id)

    async def test_unknown_id(self, service: LiveRequestService):
        with pytest.raises(NotFoundError):
            await service.finish(404)

    async def test_get_live_request(self, service: LiveRequestService, live_request):
        result = await service.get_live_request(live_request.id)

        assert result == live_request

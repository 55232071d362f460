"""Tests for customer token refresh."""

import pytest

from live_shopping.domain.live_request.live_request_domain import LiveRequestService
from live_shopping.domain.live_request.live_request_models import LiveRequestCreateParams
from live_shopping.utils.app_errors import NotFoundError, ProviderError


@pytest.fixture
async def live_request(service: LiveRequestService):
    return await service.create_live_request(
        LiveRequestCreateParams(
            user_name="Alice",
            user_email="alice@x.com",
            product={"id": 1, "title": "Shoes"},
        )
    )


class TestGetUserToken:
    async def test_refreshes_customer_participant(
        self, service: LiveRequestService, live_request, dyte
    ):
        result = await service.get_user_token(live_request.id)

        assert result.dyte_auth_token
        assert result.live_request_id == live_request.id
        [refresh] = dyte.calls_to("refresh_participant_token")
        assert refresh == {
            "meeting_id": live_request.dyte_meeting_id,
            "participant_id": live_request.user_dyte_participant_id,
        }

    async def test_always_refreshes_without_mutating(
        self, service: LiveRequestService, live_request, repository, dyte
    ):
        before = await repository.get(live_request.id)

        first = await service.get_user_token(live_request.id)
        second = await service.get_user_token(live_request.id)

        assert first.dyte_auth_token != second.dyte_auth_token
        assert len(dyte.calls_to("refresh_participant_token")) == 2
        assert await repository.get(live_request.id) == before

    async def test_unknown_id(self, service: LiveRequestService, dyte):
        with pytest.raises(NotFoundError):
            await service.get_user_token(42)

        assert dyte.calls == []

    async def test_provider_failure_propagates(
        self, service: LiveRequestService, live_request, dyte
    ):
        dyte.fail_on.add("refresh_participant_token")

        with pytest.raises(ProviderError) as exc_info:
            await service.get_user_token(live_request.id)

        assert exc_info.value.provider_body == {"error": "unavailable"}

    @pytest.mark.parametrize("request_id", [0, -1, 2**63, 10**30])
    async def test_out_of_range_id_is_not_found(
        self, service: LiveRequestService, repository, dyte, request_id
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await service.get_user_token(request_id)

        assert exc_info.value.status_code == 404
        assert dyte.calls == []

"""Tests for a support agent joining a live request."""

import pytest

from live_shopping.domain.live_request.live_request_domain import LiveRequestService
from live_shopping.domain.live_request.live_request_models import LiveRequestCreateParams
from live_shopping.schemas import LiveRequestStatus
from live_shopping.utils.app_errors import InvalidStateError, NotFoundError, ProviderError


@pytest.fixture
async def live_request(service: LiveRequestService):
    return await service.create_live_request(
        LiveRequestCreateParams(
            user_name="Alice",
            user_email="alice@x.com",
            product={"id": 1, "title": "Shoes"},
        )
    )


class TestStart:
    async def test_first_start_activates(self, service: LiveRequestService, live_request, dyte):
        result = await service.start(live_request.id)

        assert result.created is True
        assert result.dyte_auth_token
        assert result.live_request.status == LiveRequestStatus.ACTIVE
        assert result.live_request.support_user_dyte_participant_id

        [support_call] = dyte.calls_to("add_participant")[1:]
        assert support_call == {
            "meeting_id": live_request.dyte_meeting_id,
            "name": "Customer Support",
            "preset_name": "group_call_host",
            "custom_participant_id": f"support-{live_request.id}",
        }

    async def test_second_start_reuses_participant(
        self, service: LiveRequestService, live_request, repository, dyte
    ):
        first = await service.start(live_request.id)
        support_id = first.live_request.support_user_dyte_participant_id

        second = await service.start(live_request.id)

        assert second.created is False
        assert second.dyte_auth_token
        assert second.live_request.support_user_dyte_participant_id == support_id

        saved = await repository.get(live_request.id)
        assert saved.status == LiveRequestStatus.ACTIVE
        assert saved.support_user_dyte_participant_id == support_id

        # customer + one support participant, never a second support seat
        assert len(dyte.calls_to("add_participant")) == 2
        [refresh] = dyte.calls_to("refresh_participant_token")
        assert refresh == {
            "meeting_id": live_request.dyte_meeting_id,
            "participant_id": support_id,
        }

    async def test_unknown_id(self, service: LiveRequestService, dyte):
        with pytest.raises(NotFoundError) as exc_info:
            await service.start(999)

        assert exc_info.value.status_code == 404
        assert dyte.calls == []

    async def test_id_beyond_bigint_is_not_found(self, service: LiveRequestService, dyte):
        with pytest.raises(NotFoundError):
            await service.start(2**63)

        assert dyte.calls == []

    async def test_provider_failure_leaves_row_pending(
        self, service: LiveRequestService, live_request, repository, dyte
    ):
        dyte.fail_on.add("add_participant")

        with pytest.raises(ProviderError):
            await service.start(live_request.id)

        saved = await repository.get(live_request.id)
        assert saved.status == LiveRequestStatus.PENDING
        assert saved.support_user_dyte_participant_id is None

    async def test_lost_race_reuses_winner(
        self, service: LiveRequestService, live_request, repository, dyte
    ):
        """Another start call attached its participant between our read and our update."""
        original_add = dyte.add_participant

        async def add_then_race(*args, **kwargs):
            participant = await original_add(*args, **kwargs)
            await repository.assign_support_participant(live_request.id, "winner-participant")
            return participant

        dyte.add_participant = add_then_race

        result = await service.start(live_request.id)

        assert result.created is False
        assert result.live_request.support_user_dyte_participant_id == "winner-participant"
        [refresh] = dyte.calls_to("refresh_participant_token")
        assert refresh["participant_id"] == "winner-participant"

    async def test_done_without_support_is_rejected(
        self, service: LiveRequestService, live_request, repository, dyte
    ):
        repository.rows[live_request.id].status = LiveRequestStatus.DONE

        with pytest.raises(InvalidStateError):
            await service.start(live_request.id)

        assert len(dyte.calls_to("add_participant")) == 1


class TestLiveShoppingScenario:
    async def test_full_flow(self, service: LiveRequestService, repository, dyte):
        """Customer requests, support joins, customer joins, support reconnects."""
        created = await service.create_live_request(
            LiveRequestCreateParams(
                user_name="Alice",
                user_email="alice@x.com",
                product={"id": 1, "title": "Shoes"},
            )
        )
        assert created.status == LiveRequestStatus.PENDING

        token_a = await service.start(created.id)
        assert token_a.created is True
        assert token_a.live_request.status == LiveRequestStatus.ACTIVE
        support_id = token_a.live_request.support_user_dyte_participant_id

        token_b = await service.get_user_token(created.id)
        assert token_b.dyte_auth_token

        rejoin = await service.start(created.id)
        assert rejoin.created is False
        assert rejoin.dyte_auth_token

        saved = await repository.get(created.id)
        assert saved.status == LiveRequestStatus.ACTIVE
        assert saved.support_user_dyte_participant_id == support_id
        assert await service.list_pending() == []

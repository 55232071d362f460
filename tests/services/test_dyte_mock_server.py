"""DyteClient talking to the in-process mock provider from tools/mock_dyte.py."""

import httpx
import pytest

from live_shopping.services.integrations.dyte_service import DyteClient
from live_shopping.utils.app_errors import ProviderError
from tools import mock_dyte


@pytest.fixture
async def client():
    dyte = DyteClient(
        "http://mock-dyte/v2",
        "org-123",
        "secret-key",
        transport=httpx.ASGITransport(app=mock_dyte.app),
    )
    yield dyte
    await dyte.aclose()


async def test_meeting_participant_token_flow(client: DyteClient):
    meeting = await client.create_meeting("Live shopping: Shoes", region="ap-south-1")
    participant = await client.add_participant(
        meeting.id,
        name="Alice",
        preset_name="group_call_participant",
        custom_participant_id="alice@x.com",
    )
    token = await client.refresh_participant_token(meeting.id, participant.id)

    assert mock_dyte.MEETINGS[meeting.id]["title"] == "Live shopping: Shoes"
    assert mock_dyte.PARTICIPANTS[participant.id]["custom_participant_id"] == "alice@x.com"
    assert participant.token
    assert token.token != participant.token


async def test_unknown_meeting_is_provider_error(client: DyteClient):
    with pytest.raises(ProviderError) as exc_info:
        await client.add_participant(
            "no-such-meeting", name="Alice", preset_name="p", custom_participant_id="a@x.com"
        )

    assert exc_info.value.provider_status == 404


async def test_wrong_meeting_for_participant(client: DyteClient):
    meeting = await client.create_meeting("a", region="ap-south-1")
    participant = await client.add_participant(
        meeting.id, name="Alice", preset_name="p", custom_participant_id="a@x.com"
    )

    with pytest.raises(ProviderError) as exc_info:
        await client.refresh_participant_token("other-meeting", participant.id)

    assert exc_info.value.provider_status == 404

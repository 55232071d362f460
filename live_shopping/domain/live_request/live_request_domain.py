"""Live video request domain service."""

from loguru import logger

from live_shopping.app_config import AppEnvironConfig, get_app_environ_config
from live_shopping.schemas import LiveRequestStatus, LiveVideoRequest
from live_shopping.services.integrations.dyte_service import DyteClient
from live_shopping.storage.live_request_repo import MAX_REQUEST_ID, LiveRequestRepository
from live_shopping.utils.app_errors import InvalidStateError, NotFoundError, ProviderError

from .live_request_models import LiveRequestCreateParams, SupportJoinResult, UserTokenResult
from .live_request_state_machine import LiveRequestStateMachine


class LiveRequestService:
    """Creates live video requests and hands out meeting tokens."""

    def __init__(
        self,
        repository: LiveRequestRepository,
        dyte: DyteClient,
        cfg: AppEnvironConfig | None = None,
    ):
        self._repo = repository
        self._dyte = dyte
        self._cfg = cfg or get_app_environ_config()

    async def _require(self, request_id: int) -> LiveVideoRequest:
        # Ids outside the BIGSERIAL range cannot exist.
        live_request: LiveVideoRequest | None = None
        if 1 <= request_id <= MAX_REQUEST_ID:
            live_request = await self._repo.get(request_id)
        if live_request is None:
            raise NotFoundError(f"Live request not found: {request_id}")
        return live_request

    async def create_live_request(self, params: LiveRequestCreateParams) -> LiveVideoRequest:
        """Provision a meeting and the customer's participant, then persist a PENDING row.

        Params arrive validated. The customer's join token is not returned; it is
        fetched with get_user_token.
        """
        product = params.product
        user_name = params.user_name
        user_email = params.user_email

        meeting = await self._dyte.create_meeting(
            title=f"Live shopping: {product.title}",
            region=self._cfg.DYTE_MEETING_REGION,
            record_on_start=False,
        )

        try:
            participant = await self._dyte.add_participant(
                meeting.id,
                name=user_name,
                preset_name=self._cfg.DYTE_CUSTOMER_PRESET,
                custom_participant_id=user_email,
            )
        except ProviderError:
            # No provider-side rollback: the meeting stays orphaned.
            logger.warning(f"Customer participant not added; meeting {meeting.id} orphaned")
            raise

        live_request = await self._repo.insert(
            user_email=user_email,
            user_name=user_name,
            user_dyte_participant_id=participant.id,
            dyte_meeting_id=meeting.id,
            product=product.model_dump(mode="json"),
        )
        logger.info(
            f"Created live request {live_request.id} meeting={meeting.id} product={product.id}"
        )
        return live_request

    async def list_pending(self) -> list[LiveVideoRequest]:
        """Return every request still waiting for a support agent."""
        return await self._repo.list_by_status(LiveRequestStatus.PENDING)

    async def get_live_request(self, request_id: int) -> LiveVideoRequest:
        return await self._require(request_id)

    async def start(self, request_id: int) -> SupportJoinResult:
        """Join a support agent to the request's meeting.

        The first call adds the support participant and moves the request to
        ACTIVE (created=True). Later calls refresh the token of that same
        participant and leave the row untouched (created=False).
        """
        live_request = await self._require(request_id)

        support_id = live_request.support_user_dyte_participant_id
        if support_id:
            return await self._rejoin_support(live_request, support_id)

        if not LiveRequestStateMachine.can_transition(
            live_request.status, LiveRequestStatus.ACTIVE
        ):
            raise InvalidStateError(
                f"Live request {request_id} cannot be started from status {live_request.status}"
            )

        participant = await self._dyte.add_participant(
            live_request.dyte_meeting_id,
            name=self._cfg.DYTE_SUPPORT_DISPLAY_NAME,
            preset_name=self._cfg.DYTE_SUPPORT_PRESET,
            custom_participant_id=f"support-{live_request.id}",
        )

        updated = await self._repo.assign_support_participant(live_request.id, participant.id)
        if updated is None:
            # Another start call attached its participant first.
            current = await self._require(request_id)
            winner_id = current.support_user_dyte_participant_id
            if not winner_id:
                raise InvalidStateError(
                    f"Live request {request_id} cannot be started from status {current.status}"
                )
            logger.warning(
                f"Concurrent start on live request {request_id}: participant {participant.id} "
                f"orphaned, reusing {winner_id}"
            )
            return await self._rejoin_support(current, winner_id)

        logger.info(
            f"Live request {request_id} ACTIVE, support participant={participant.id}"
        )
        return SupportJoinResult(
            dyte_auth_token=participant.token,
            created=True,
            live_request=updated,
        )

    async def _rejoin_support(
        self, live_request: LiveVideoRequest, participant_id: str
    ) -> SupportJoinResult:
        token = await self._dyte.refresh_participant_token(
            live_request.dyte_meeting_id, participant_id
        )
        logger.info(f"Support rejoined live request {live_request.id}")
        return SupportJoinResult(
            dyte_auth_token=token.token,
            created=False,
            live_request=live_request,
        )

    async def get_user_token(self, request_id: int) -> UserTokenResult:
        """Issue a fresh join token for the customer. Tokens are never stored."""
        live_request = await self._require(request_id)
        token = await self._dyte.refresh_participant_token(
            live_request.dyte_meeting_id,
            live_request.user_dyte_participant_id,
        )
        return UserTokenResult(dyte_auth_token=token.token, live_request_id=live_request.id)

    async def finish(self, request_id: int, feedback: str | None = None) -> LiveVideoRequest:
        """Close an ACTIVE request, optionally recording feedback."""
        live_request = await self._require(request_id)

        if not LiveRequestStateMachine.can_transition(live_request.status, LiveRequestStatus.DONE):
            raise InvalidStateError(
                f"Live request {request_id} cannot be finished from status {live_request.status}"
            )

        updated = await self._repo.transition_status(
            request_id,
            live_request.status,
            LiveRequestStatus.DONE,
            feedback=feedback,
        )
        if updated is None:
            raise InvalidStateError(f"Live request {request_id} changed status concurrently")

        logger.info(f"Live request {request_id} DONE")
        return updated

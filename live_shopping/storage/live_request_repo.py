"""Persistence for live video requests (``live_video_requests`` table)."""

from typing import Any

from loguru import logger

from live_shopping.schemas import LiveRequestStatus, LiveVideoRequest

from .postgres import AsyncPGClient, PostgresManager

TABLE_NAME = "live_video_requests"

# Upper bound of the BIGSERIAL id column.
MAX_REQUEST_ID = 2**63 - 1

SCHEMA_STATEMENTS = (
    f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id BIGSERIAL PRIMARY KEY,
        user_email TEXT NOT NULL,
        user_name TEXT NOT NULL,
        user_dyte_participant_id TEXT NOT NULL UNIQUE,
        dyte_meeting_id TEXT NOT NULL UNIQUE,
        support_user_dyte_participant_id TEXT UNIQUE,
        status TEXT NOT NULL DEFAULT 'PENDING'
            CHECK (status IN ('PENDING', 'ACTIVE', 'DONE')),
        feedback TEXT NOT NULL DEFAULT '',
        product JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    f"CREATE INDEX IF NOT EXISTS {TABLE_NAME}_status_idx ON {TABLE_NAME} (status)",
)

_COLUMNS = (
    "id, user_email, user_name, user_dyte_participant_id, dyte_meeting_id, "
    "support_user_dyte_participant_id, status, feedback, product, created_at, updated_at"
)


async def init_schema(client: AsyncPGClient) -> None:
    """Create the table and its indexes if they do not exist yet."""
    async with client.transaction():
        for statement in SCHEMA_STATEMENTS:
            await client.execute(statement)
    logger.info("Postgres schema ready: {}", TABLE_NAME)


class LiveRequestRepository:
    """Row-level access to live video requests."""

    def __init__(self, manager: PostgresManager, label: str = "default"):
        self._manager = manager
        self._label = label

    async def init_schema(self) -> None:
        async with self._manager.session(self._label) as client:
            await init_schema(client)

    async def insert(
        self,
        *,
        user_email: str,
        user_name: str,
        user_dyte_participant_id: str,
        dyte_meeting_id: str,
        product: dict[str, Any],
    ) -> LiveVideoRequest:
        """Insert a PENDING row with both provider identifiers in one statement."""
        async with self._manager.session(self._label) as client:
            record = await client.fetchrow(
                f"""
                INSERT INTO {TABLE_NAME}
                    (user_email, user_name, user_dyte_participant_id, dyte_meeting_id,
                     status, product)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {_COLUMNS}
                """,
                user_email,
                user_name,
                user_dyte_participant_id,
                dyte_meeting_id,
                LiveRequestStatus.PENDING.value,
                product,
            )
        return LiveVideoRequest.from_record(record)

    async def get(self, request_id: int) -> LiveVideoRequest | None:
        async with self._manager.session(self._label) as client:
            record = await client.fetchrow(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE id = $1",
                request_id,
            )
        return LiveVideoRequest.from_record(record) if record else None

    async def list_by_status(self, status: LiveRequestStatus) -> list[LiveVideoRequest]:
        async with self._manager.session(self._label) as client:
            records = await client.fetch(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE status = $1 ORDER BY id",
                status.value,
            )
        return [LiveVideoRequest.from_record(record) for record in records]

    async def assign_support_participant(
        self,
        request_id: int,
        participant_id: str,
    ) -> LiveVideoRequest | None:
        """Attach the support participant and mark the request ACTIVE.

        Compare-and-set: only succeeds while no support participant is attached
        and the request is still PENDING. Returns None when another caller won.
        """
        async with self._manager.session(self._label) as client:
            record = await client.fetchrow(
                f"""
                UPDATE {TABLE_NAME}
                SET support_user_dyte_participant_id = $2,
                    status = $3,
                    updated_at = now()
                WHERE id = $1
                  AND support_user_dyte_participant_id IS NULL
                  AND status = $4
                RETURNING {_COLUMNS}
                """,
                request_id,
                participant_id,
                LiveRequestStatus.ACTIVE.value,
                LiveRequestStatus.PENDING.value,
            )
        return LiveVideoRequest.from_record(record) if record else None

    async def transition_status(
        self,
        request_id: int,
        current: LiveRequestStatus,
        new: LiveRequestStatus,
        *,
        feedback: str | None = None,
    ) -> LiveVideoRequest | None:
        """Move a request from ``current`` to ``new``; None if it was not in ``current``."""
        async with self._manager.session(self._label) as client:
            record = await client.fetchrow(
                f"""
                UPDATE {TABLE_NAME}
                SET status = $3,
                    feedback = COALESCE($4, feedback),
                    updated_at = now()
                WHERE id = $1 AND status = $2
                RETURNING {_COLUMNS}
                """,
                request_id,
                current.value,
                new.value,
                feedback,
            )
        return LiveVideoRequest.from_record(record) if record else None

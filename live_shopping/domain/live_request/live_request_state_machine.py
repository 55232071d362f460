"""Live request state machine for managing status transitions."""

from live_shopping.schemas import LiveRequestStatus


class LiveRequestStateMachine:
    """State machine for live video request status transitions.

    State flow with triggers:
    - PENDING (request created by the customer) -> ACTIVE (support agent joined via start)
    - ACTIVE -> DONE (session finished)
    - DONE is terminal

    A request never moves backwards: a support agent rejoining an ACTIVE
    request keeps it ACTIVE.
    """

    TRANSITIONS: dict[LiveRequestStatus, set[LiveRequestStatus]] = {
        LiveRequestStatus.PENDING: {LiveRequestStatus.ACTIVE},
        LiveRequestStatus.ACTIVE: {LiveRequestStatus.DONE},
        LiveRequestStatus.DONE: set(),
    }

    @classmethod
    def can_transition(cls, current: LiveRequestStatus, new: LiveRequestStatus) -> bool:
        """Check if a status transition is valid.

        Args:
            current: Current request status
            new: Target status

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

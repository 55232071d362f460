"""Live request status enum."""

from enum import Enum


class LiveRequestStatus(str, Enum):
    """Live video request lifecycle states.

    State Transition Flow:

    PENDING → ACTIVE → DONE

    State Descriptions:
    - PENDING: Customer asked for a session, no support agent yet. Set by create.
    - ACTIVE: A support agent joined the meeting. Set by the first start call.
    - DONE: Session finished. Set by finish (only from ACTIVE).

    Terminal states (no further transitions): DONE
    """

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    DONE = "DONE"

    def __str__(self) -> str:
        return self.value


__all__ = ["LiveRequestStatus"]

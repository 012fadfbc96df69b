"""Deposit status vocabularies."""

from enum import Enum

SWORD_STATE_SCHEME = "http://purl.org/net/sword/terms/state"


class SwordState(str, Enum):
    """Deposit states reported by DSpace in a SWORD v2 statement."""

    ARCHIVED = "http://dspace.org/state/archived"
    WITHDRAWN = "http://dspace.org/state/withdrawn"
    IN_REVIEW = "http://dspace.org/state/inreview"
    IN_PROGRESS = "http://dspace.org/state/inprogress"


# Most terminal first
SWORD_STATE_PRECEDENCE: tuple[SwordState, ...] = (
    SwordState.ARCHIVED,
    SwordState.WITHDRAWN,
    SwordState.IN_REVIEW,
    SwordState.IN_PROGRESS,
)


class DepositStatus(str, Enum):
    """Repository-agnostic outcome of a deposit.

    SUBMITTED is the initial state; ACCEPTED and REJECTED are terminal.
    """

    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def terminal(self) -> bool:
        return self is not DepositStatus.SUBMITTED

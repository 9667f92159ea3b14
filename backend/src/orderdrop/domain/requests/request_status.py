"""RequestStatus state machine for the order upload lifecycle

State flow:
    Pending → Completed → Completed-Reset-Requested → Pending (reset confirmed)
                          Completed-Reset-Requested → Completed (grace period elapsed)

There is no terminal state; a request can cycle indefinitely.
"""

from enum import Enum
from typing import Dict, List, Tuple

from .errors import InvalidStateError


class RequestStatus(str, Enum):
    """Upload request status enum

    Values are stored verbatim in the request store.
    """
    PENDING = "Pending"                                # Waiting for buyer files
    COMPLETED = "Completed"                            # Files delivered to the order folder
    RESET_REQUESTED = "Completed-Reset-Requested"      # Buyer asked to start over


class RequestEvent(str, Enum):
    """Events that move a request between states"""
    FILES_SUBMITTED = "files_submitted"
    RESET_REQUESTED = "reset_requested"
    RESET_CONFIRMED = "reset_confirmed"
    GRACE_PERIOD_ELAPSED = "grace_period_elapsed"


# Each event has exactly one source state
EVENT_TRANSITIONS: Dict[RequestEvent, Tuple[RequestStatus, RequestStatus]] = {
    RequestEvent.FILES_SUBMITTED: (RequestStatus.PENDING, RequestStatus.COMPLETED),
    RequestEvent.RESET_REQUESTED: (RequestStatus.COMPLETED, RequestStatus.RESET_REQUESTED),
    RequestEvent.RESET_CONFIRMED: (RequestStatus.RESET_REQUESTED, RequestStatus.PENDING),
    RequestEvent.GRACE_PERIOD_ELAPSED: (RequestStatus.RESET_REQUESTED, RequestStatus.COMPLETED),
}


def can_apply(current: RequestStatus, event: RequestEvent) -> bool:
    """Check whether an event is valid from the current status

    Example:
        >>> can_apply(RequestStatus.PENDING, RequestEvent.FILES_SUBMITTED)
        True
        >>> can_apply(RequestStatus.COMPLETED, RequestEvent.FILES_SUBMITTED)
        False
    """
    source, _ = EVENT_TRANSITIONS[event]
    return current == source


def next_status(current: RequestStatus, event: RequestEvent) -> RequestStatus:
    """Resolve the target status for an event

    Raises:
        InvalidStateError: If the event is not valid from the current status
    """
    source, target = EVENT_TRANSITIONS[event]
    if not can_apply(current, event):
        raise InvalidStateError(
            f"Cannot apply {event.value} to a request in status {current.value} "
            f"(requires {source.value})",
            current_status=current.value,
        )
    return target


def get_allowed_events(current: RequestStatus) -> List[RequestEvent]:
    """List the events valid from the current status"""
    return [event for event, (source, _) in EVENT_TRANSITIONS.items() if source == current]

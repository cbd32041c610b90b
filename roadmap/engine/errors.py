"""Exception hierarchy for the timeline scheduler.

All errors derive from ValueError so callers that already guard input with
`except ValueError` keep working. The API layer maps each class to an HTTP
status code.
"""

from typing import Any, Dict, List, Optional


class SchedulingError(ValueError):
    """Base class for scheduler errors."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidDateRangeError(SchedulingError):
    """Start date falls after end date, or the range is otherwise malformed."""


class BlockLockedError(SchedulingError):
    """The block's initiative has locked dates (or is not draggable at all)."""


class AssignmentLockedError(SchedulingError):
    """The block's initiative has a locked assignment and cannot be reassigned."""


class CascadeLockedError(SchedulingError):
    """A push resolution would have to move a block whose dates are locked."""

    def __init__(self, message: str, locked_block_ids: List[str]):
        super().__init__(message, {"locked_block_ids": locked_block_ids})
        self.locked_block_ids = locked_block_ids


class InteractionBusyError(SchedulingError):
    """A drag was started while a conflict decision is still pending."""


class BlockNotFoundError(SchedulingError):
    """Referenced block, initiative or assignee does not exist."""

    status_code = 404


class StaleScheduleError(SchedulingError):
    """The schedule changed between the conflict check and the commit."""

    status_code = 409


class ScheduleStoreError(SchedulingError):
    """The store was unreachable or rejected a request (seen by the client)."""

    status_code = 502

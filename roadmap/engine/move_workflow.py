"""Client side of the two-phase move protocol (check, decide, commit).

A dropped block is first checked against the store. Without conflicts the
move is committed straight away; with conflicts it waits for the user to
pick stack, push or cancel. Every store failure is reported as "did not
apply" and the view must refresh before the next drag.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Union

from roadmap.engine.errors import InteractionBusyError, SchedulingError
from roadmap.engine.interaction import DragController, MoveRequested
from roadmap.models.schedule_requests import (
    BumpedBlock,
    ConflictCheckResponse,
    ConflictResolution,
    ConflictingBlock,
    MoveCheckRequest,
    MoveCommitRequest,
    MoveCommitResponse,
)

logger = logging.getLogger(__name__)

CANCEL = "cancel"


class ScheduleStore(Protocol):
    """The collaborating store (normally `ScheduleApiClient`)."""

    def check_move(self, request: MoveCheckRequest) -> ConflictCheckResponse:
        ...

    def commit_move(self, request: MoveCommitRequest) -> MoveCommitResponse:
        ...


class MoveStatus(str, Enum):
    """Result of a workflow step."""
    COMMITTED = "committed"
    CONFLICT = "conflict"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class MoveOutcome:
    status: MoveStatus
    message: str = ""
    conflicts: List[ConflictingBlock] = field(default_factory=list)
    bumped_blocks: List[BumpedBlock] = field(default_factory=list)


@dataclass
class PendingMove:
    """A checked move waiting for the user's conflict decision."""
    request: MoveCheckRequest
    title: str
    conflicts: List[ConflictingBlock]
    block_version: int

    def expected_versions(self) -> Dict[str, int]:
        versions = {c.id: c.version for c in self.conflicts}
        versions[self.request.block_id] = self.block_version
        return versions


class MoveWorkflow:
    """Drives check -> decision -> commit for one timeline view."""

    def __init__(self, store: ScheduleStore, controller: Optional[DragController] = None):
        self.store = store
        self.controller = controller
        self.pending: Optional[PendingMove] = None
        self.needs_refresh = False

    def _sync_controller(self) -> None:
        if self.controller is not None:
            self.controller.busy = self.pending is not None or self.needs_refresh

    def submit(self, move: MoveRequested, title: str = "") -> MoveOutcome:
        """Check a dropped block and commit it if nothing overlaps.

        Raises:
            InteractionBusyError: A decision is pending or the view has not
                been refreshed since the last store call
        """
        if self.pending is not None or self.needs_refresh:
            raise InteractionBusyError("Another schedule change is still pending")

        request = MoveCheckRequest(
            block_id=move.block.id,
            new_start_date=move.new_start_date,
            new_end_date=move.new_end_date,
            new_assignee_id=move.new_assignee_id,
        )
        try:
            check = self.store.check_move(request)
        except SchedulingError as e:
            logger.warning(f"Conflict check failed for block {request.block_id}: {e}")
            self.needs_refresh = True
            self._sync_controller()
            return MoveOutcome(MoveStatus.FAILED, message=f"Could not move block: {e}")
        except Exception as e:
            logger.error(f"Conflict check failed for block {request.block_id}: {type(e).__name__}: {str(e)}")
            self.needs_refresh = True
            self._sync_controller()
            return MoveOutcome(MoveStatus.FAILED, message=f"Could not move block: {e}")

        if not check.has_conflicts:
            return self._commit(
                request,
                ConflictResolution.NONE,
                {request.block_id: check.block_version},
            )

        self.pending = PendingMove(
            request=request,
            title=title,
            conflicts=list(check.conflicting_blocks),
            block_version=check.block_version,
        )
        self._sync_controller()
        return MoveOutcome(MoveStatus.CONFLICT, conflicts=list(check.conflicting_blocks))

    def resolve(self, resolution: Union[ConflictResolution, str]) -> MoveOutcome:
        """Apply the user's decision for the pending move ("stack", "push" or "cancel")."""
        if self.pending is None:
            raise SchedulingError("No move is waiting for a conflict decision")
        if resolution == CANCEL:
            return self.cancel()

        pending = self.pending
        self.pending = None
        return self._commit(pending.request, ConflictResolution(resolution), pending.expected_versions())

    def cancel(self) -> MoveOutcome:
        """Drop the pending move; nothing was written."""
        self.pending = None
        self._sync_controller()
        return MoveOutcome(MoveStatus.CANCELLED)

    def refreshed(self) -> None:
        """The view re-fetched authoritative state; drags may start again."""
        self.needs_refresh = False
        self._sync_controller()

    def _commit(
        self,
        request: MoveCheckRequest,
        resolution: ConflictResolution,
        expected_versions: Dict[str, int],
    ) -> MoveOutcome:
        commit = MoveCommitRequest(
            **request.model_dump(),
            resolution=resolution,
            expected_versions=expected_versions,
        )
        # Success or failure, the rendered snapshot is now out of date.
        self.needs_refresh = True
        try:
            result = self.store.commit_move(commit)
        except SchedulingError as e:
            logger.warning(f"Commit failed for block {request.block_id} ({resolution.value}): {e}")
            self._sync_controller()
            return MoveOutcome(MoveStatus.FAILED, message=f"Changes did not apply: {e}")
        except Exception as e:
            logger.error(
                f"Commit failed for block {request.block_id} ({resolution.value}): {type(e).__name__}: {str(e)}"
            )
            self._sync_controller()
            return MoveOutcome(MoveStatus.FAILED, message=f"Changes did not apply: {e}")

        self._sync_controller()
        return MoveOutcome(MoveStatus.COMMITTED, bumped_blocks=list(result.bumped_blocks))

"""Tests for block and request model validation."""

import pytest
from datetime import date
from pydantic import ValidationError

from roadmap.models.schedule_requests import ConflictResolution, MoveCommitRequest
from roadmap.models.scheduled_block import AssigneeKind, ScheduledBlock, UnavailabilityBlock


def test_block_needs_exactly_one_assignee():
    with pytest.raises(ValidationError):
        ScheduledBlock(id="x", initiative_id="i", start_date=date(2026, 3, 2), end_date=date(2026, 3, 3))
    with pytest.raises(ValidationError):
        ScheduledBlock(
            id="x", initiative_id="i", engineer_id="alice", squad_id="platform",
            start_date=date(2026, 3, 2), end_date=date(2026, 3, 3),
        )


def test_block_rejects_inverted_range():
    with pytest.raises(ValidationError):
        ScheduledBlock(
            id="x", initiative_id="i", engineer_id="alice",
            start_date=date(2026, 3, 5), end_date=date(2026, 3, 2),
        )


def test_timestamps_keep_their_calendar_date():
    block = ScheduledBlock(
        id="x", initiative_id="i", squad_id="platform",
        start_date="2025-03-10T00:00:00Z", end_date="2025-03-14T23:30:00-08:00",
    )
    assert block.start_date == date(2025, 3, 10)
    assert block.end_date == date(2025, 3, 14)
    assert block.assignee_kind == AssigneeKind.SQUAD
    assert block.assignee_id == "platform"


def test_unavailability_label():
    pto = UnavailabilityBlock(id="u", engineer_id="alice", type="TRAVEL",
                              start_date=date(2026, 3, 2), end_date=date(2026, 3, 2))
    assert pto.label == "Travel"


def test_commit_request_defaults_to_none_resolution():
    request = MoveCommitRequest(block_id="x", new_start_date="2026-03-02", new_end_date="2026-03-03")
    assert request.resolution == ConflictResolution.NONE
    assert request.expected_versions is None
    with pytest.raises(ValidationError):
        MoveCommitRequest(block_id="x", new_start_date="2026-03-02", new_end_date="2026-03-03", resolution="shove")

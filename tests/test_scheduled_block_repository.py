"""Tests for the scheduled block and initiative repositories."""

import pytest
from datetime import date
from sqlalchemy.exc import OperationalError

from roadmap.database.audit_repository import AuditRepository
from roadmap.database.initiative_repository import InitiativeRepository
from roadmap.engine.conflicts import BlockShift
from roadmap.engine.errors import BlockNotFoundError, StaleScheduleError
from roadmap.models.audit_event import AuditEvent, AuditEventType
from roadmap.models.scheduled_block import AssigneeKind


class TestScheduledBlockRepository:
    def test_create_and_get(self, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 5))
        stored = block_repository.get_by_id("a")
        assert stored.start_date == date(2026, 3, 2)
        assert stored.engineer_id == "alice"
        assert stored.version == 1
        assert block_repository.get_by_id("missing") is None

    def test_list_in_window_is_inclusive(self, make_block, block_repository):
        make_block("a", date(2026, 2, 23), date(2026, 3, 2))
        make_block("b", date(2026, 3, 31), date(2026, 4, 3))
        make_block("c", date(2026, 4, 1), date(2026, 4, 3))
        ids = [b.id for b in block_repository.list_in_window(date(2026, 3, 2), date(2026, 3, 31))]
        assert ids == ["a", "b"]

    def test_list_for_assignee(self, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 5))
        make_block("b", date(2026, 3, 2), date(2026, 3, 5), engineer_id="bob")
        make_block("s", date(2026, 3, 2), date(2026, 3, 5), squad_id="platform")
        assert [b.id for b in block_repository.list_for_assignee(AssigneeKind.ENGINEER, "alice")] == ["a"]
        assert [b.id for b in block_repository.list_for_assignee(AssigneeKind.SQUAD, "platform")] == ["s"]

    def test_apply_move_bumps_versions_and_writes_audit(self, db_session, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 3), engineer_id="bob")
        make_block("b", date(2026, 3, 3), date(2026, 3, 6))
        audit = AuditEvent(id="ev1", event_type=AuditEventType.MOVE_AND_REASSIGN, entity_id="a")

        moved, pushed = block_repository.apply_move(
            "a",
            date(2026, 3, 2),
            date(2026, 3, 4),
            engineer_id="alice",
            squad_id=None,
            shifts=[BlockShift("b", date(2026, 3, 5), date(2026, 3, 10))],
            expected_versions={"a": 1, "b": 1},
            initiative_engineer_id="alice",
            audit=audit,
        )

        assert moved.engineer_id == "alice"
        assert moved.version == 2
        assert pushed[0].start_date == date(2026, 3, 5)
        assert pushed[0].version == 2
        assert InitiativeRepository(db_session).get("init-a").assigned_engineer_id == "alice"
        events = AuditRepository(db_session).list_for_entity("a")
        assert [e.event_type for e in events] == ["move_and_reassign"]

    def test_stale_version_rejects_whole_move(self, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 3))
        make_block("b", date(2026, 3, 3), date(2026, 3, 6))

        with pytest.raises(StaleScheduleError):
            block_repository.apply_move(
                "a", date(2026, 3, 9), date(2026, 3, 10),
                engineer_id="alice", squad_id=None,
                shifts=[BlockShift("b", date(2026, 3, 11), date(2026, 3, 16))],
                expected_versions={"a": 1, "b": 7},
            )

        assert block_repository.get_by_id("a").start_date == date(2026, 3, 2)
        assert block_repository.get_by_id("b").start_date == date(2026, 3, 3)

    def test_failed_commit_rolls_back_every_block(self, db_session, make_block, block_repository, monkeypatch):
        make_block("a", date(2026, 3, 2), date(2026, 3, 3))
        make_block("b", date(2026, 3, 3), date(2026, 3, 6))

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(OperationalError):
            block_repository.apply_move(
                "a", date(2026, 3, 9), date(2026, 3, 10),
                engineer_id="alice", squad_id=None,
                shifts=[BlockShift("b", date(2026, 3, 11), date(2026, 3, 16))],
            )
        monkeypatch.undo()

        assert block_repository.get_by_id("a").start_date == date(2026, 3, 2)
        assert block_repository.get_by_id("b").start_date == date(2026, 3, 3)
        assert block_repository.get_by_id("a").version == 1

    def test_apply_move_missing_block(self, block_repository, team):
        with pytest.raises(BlockNotFoundError):
            block_repository.apply_move(
                "ghost", date(2026, 3, 2), date(2026, 3, 3), engineer_id="alice", squad_id=None
            )

    def test_delete(self, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 3))
        assert block_repository.delete("a") is True
        assert block_repository.delete("a") is False
        assert block_repository.get_by_id("a") is None


class TestInitiativeRepository:
    def test_delete_initiative_removes_its_blocks(self, db_session, make_block, block_repository):
        make_block("a", date(2026, 3, 2), date(2026, 3, 3), initiative_id="search")
        make_block("b", date(2026, 3, 9), date(2026, 3, 10), initiative_id="search")
        make_block("c", date(2026, 3, 9), date(2026, 3, 10), initiative_id="billing")

        assert InitiativeRepository(db_session).delete("search") is True
        assert [b.id for b in block_repository.get_all()] == ["c"]
        assert InitiativeRepository(db_session).delete("search") is False

    def test_set_assignee(self, db_session, make_initiative):
        make_initiative("search")
        repo = InitiativeRepository(db_session)
        updated = repo.set_assignee("search", squad_id="platform")
        assert updated.assigned_squad_id == "platform"
        assert updated.assigned_engineer_id is None
        assert repo.set_assignee("nope", engineer_id="alice") is None

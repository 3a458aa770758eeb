"""Tests for the talent-migration job (approved applications → roster).

Covers:
  - Category mapping from free-text category_type
  - Field mapping application → roster entry
  - Only approved applications move; re-runs skip what is on the roster
  - Case-insensitive duplicate detection
  - Per-item isolation and batch size
  - Gate, run log and fetch failure
"""
import sys
from pathlib import Path

import pytest
from sqlalchemy import func, select

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from modules.talent.authorization import PermissionDenied, Principal, Unauthorized
from modules.talent.migration_service import (
    FUNCTION_NAME,
    application_to_talent,
    map_category,
    run_talent_migration,
)
from modules.talent.models import AutomationLog, Talent, TalentCategory
from modules.talent.reporting import get_migration_stats, get_sync_logs
from modules.talent.schemas import MigrationItemStatus
from modules.talent.store import StoreError
from tests.fixtures.talent import FlakyStore, make_application, make_role, make_talent

ADMIN = Principal(user_id="admin-1")
EDITOR = Principal(user_id="editor-1")
VIEWER = Principal(user_id="viewer-1")


@pytest.fixture(autouse=True)
def roles(session):
    make_role(session, "admin-1", "admin")
    make_role(session, "editor-1", "editor")
    make_role(session, "viewer-1", "viewer")


def _roster(session):
    return sorted(session.scalars(select(Talent.email)))


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

class TestMapping:

    @pytest.mark.parametrize("category_type, expected", [
        ("Model", TalentCategory.MODEL),
        ("Fashion Designer", TalentCategory.DESIGNER),
        ("photographer", TalentCategory.PHOTOGRAPHER),
        ("Actress", TalentCategory.ACTOR),
        ("Singer", TalentCategory.MUSICAL_ARTIST),
        ("Band", TalentCategory.MUSICAL_ARTIST),
        ("Painter", TalentCategory.FINE_ARTIST),
        ("Event planner", TalentCategory.EVENT_PLANNER),
        ("dancer", TalentCategory.MODEL),
        ("", TalentCategory.MODEL),
        (None, TalentCategory.MODEL),
    ])
    def test_map_category(self, category_type, expected):
        assert map_category(category_type) is expected

    def test_application_fields(self, session):
        app = make_application(
            session,
            email="amara@example.com",
            full_name="Amara Okafor",
            status="approved",
            category_type="designer",
            portfolio_url="https://amara.example.com",
            photo_url="https://cdn.example.com/amara.jpg",
            social_media={"instagram": "@amara", "telegram": None, "tiktok": "@a.tt"},
        )

        talent = application_to_talent(app)

        assert talent.full_name == "Amara Okafor"
        assert talent.email == "amara@example.com"
        assert talent.category == "designer"
        assert talent.level == "beginner"
        assert talent.portfolio_url == "https://amara.example.com"
        assert talent.profile_image_url == "https://cdn.example.com/amara.jpg"
        assert talent.social_media_links == {
            "instagram": "@amara",
            "telegram": None,
            "tiktok": "@a.tt",
            "portfolio": "https://amara.example.com",
        }

    def test_no_social_media(self, session):
        app = make_application(session, status="approved", social_media=None)
        assert application_to_talent(app).social_media_links is None


# ---------------------------------------------------------------------------
# Migration runs
# ---------------------------------------------------------------------------

class TestMigration:

    def test_only_approved_are_migrated(self, session, config):
        make_application(session, email="a@example.com", status="approved")
        make_application(session, email="b@example.com", status="pending")
        make_application(session, email="c@example.com", status="rejected")

        summary = run_talent_migration(session, EDITOR, config=config)

        assert summary.success is True
        assert summary.processed == 1
        assert summary.migrated_count == 1
        assert summary.results[0].status == MigrationItemStatus.MIGRATED
        assert _roster(session) == ["a@example.com"]

    def test_rerun_skips(self, session, config):
        make_application(session, email="a@example.com", status="approved")
        first = run_talent_migration(session, ADMIN, config=config)

        second = run_talent_migration(session, ADMIN, config=config)

        assert second.migrated_count == 0
        assert second.skipped_count == 1
        assert second.results[0].talent_id == first.results[0].talent_id
        assert _roster(session) == ["a@example.com"]

    def test_existing_email_matched_case_insensitively(self, session, config):
        existing = make_talent(session, email="Amara@Example.com")
        make_application(session, email="amara@example.com", status="approved")

        summary = run_talent_migration(session, ADMIN, config=config)

        assert summary.results[0].status == MigrationItemStatus.SKIPPED
        assert summary.results[0].talent_id == existing.id
        assert session.scalar(select(func.count(Talent.id))) == 1

    def test_nothing_approved(self, session, config):
        make_application(session, status="pending")

        summary = run_talent_migration(session, ADMIN, config=config)

        assert summary.processed == 0
        assert summary.message == "No approved applications to migrate"
        assert session.scalar(select(func.count(AutomationLog.id))) == 0

    def test_failure_is_isolated(self, session, config):
        make_application(session, email="a@example.com", status="approved", minutes=0)
        make_application(session, email="b@example.com", status="approved", minutes=1)
        make_application(session, email="c@example.com", status="approved", minutes=2)
        store = FlakyStore(session, fail_talent_insert_for={"b@example.com"})

        summary = run_talent_migration(session, ADMIN, store=store, config=config)

        assert summary.success is False
        assert (summary.migrated_count, summary.error_count) == (2, 1)
        assert [r.status.value for r in summary.results] == ["migrated", "error", "migrated"]
        assert _roster(session) == ["a@example.com", "c@example.com"]

        retry = run_talent_migration(session, ADMIN, config=config)
        assert retry.migrated_count == 1
        assert retry.skipped_count == 2

    def test_batch_size_takes_oldest_first(self, session, config):
        for i, email in enumerate(["old@example.com", "mid@example.com", "new@example.com"]):
            make_application(session, email=email, status="approved", minutes=i)

        summary = run_talent_migration(session, ADMIN, config=config, batch_size=2)

        assert summary.processed == 2
        assert _roster(session) == ["mid@example.com", "old@example.com"]


# ---------------------------------------------------------------------------
# Gate and run log
# ---------------------------------------------------------------------------

class TestGateAndLog:

    def test_viewer_denied(self, session, config):
        make_application(session, status="approved")
        with pytest.raises(PermissionDenied):
            run_talent_migration(session, VIEWER, config=config)
        assert _roster(session) == []

    def test_anonymous_unauthorized(self, session, config):
        with pytest.raises(Unauthorized):
            run_talent_migration(session, None, config=config)

    def test_run_is_logged(self, session, config):
        make_application(session, email="a@example.com", status="approved")
        run_talent_migration(session, ADMIN, config=config, batch_size=10)

        [log] = get_sync_logs(session, function_name=FUNCTION_NAME)
        assert log["results"]["operation"] == "migrate-approved"
        assert log["results"]["migrated_count"] == 1
        assert log["results"]["batch_size"] == 10
        # the sync history stays separate
        assert get_sync_logs(session) == []

    def test_skip_only_run_not_logged(self, session, config):
        make_talent(session, email="a@example.com")
        make_application(session, email="a@example.com", status="approved")
        run_talent_migration(session, ADMIN, config=config)
        assert get_sync_logs(session, function_name=FUNCTION_NAME) == []

    def test_fetch_failure(self, session, config):
        make_application(session, status="approved")
        store = FlakyStore(session, fail_fetch=True)

        with pytest.raises(StoreError):
            run_talent_migration(session, ADMIN, store=store, config=config)

        [log] = get_sync_logs(session, function_name=FUNCTION_NAME)
        assert log["results"]["success"] is False
        assert log["results"]["error"] == "connection refused"


class TestStats:

    def test_progress(self, session, config):
        make_application(session, email="a@example.com", status="approved")
        make_application(session, email="b@example.com", status="approved")
        make_application(session, email="c@example.com", status="pending")
        make_talent(session, email="A@example.com")

        stats = get_migration_stats(session)

        assert stats == {
            "approved_applications": 2,
            "roster_size": 1,
            "migrated_count": 1,
            "pending_count": 1,
            "migration_percentage": 50,
        }

    def test_empty(self, session):
        assert get_migration_stats(session)["migration_percentage"] == 100

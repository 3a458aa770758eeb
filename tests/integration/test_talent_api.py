"""
Intake, directory, review and user-role endpoint tests.
"""
import sys
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from modules.talent.database import get_session
from tests.fixtures.talent import bearer, make_application, make_role, make_submission


@pytest.fixture
def seeded(client):
    with get_session() as s:
        make_role(s, "admin-1", "admin")
        make_role(s, "editor-1", "editor")
        make_role(s, "viewer-1", "viewer")
    return client


SUBMISSION = {
    "full_name": "Amara Okafor",
    "email": "amara@example.com",
    "category": "model",
    "gender": "female",
    "age": 22,
    "country": "Nigeria",
    "instagram": "@amara",
}


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Talent Back-Office API"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "healthy"
    assert r.json()["backend"] == "sqlite"
    assert r.json()["pending_submissions"] == 0


def test_health_degraded_hides_sql(client, monkeypatch):
    def boom(self, *args, **kwargs):
        raise OperationalError("SELECT count(id) FROM emerge_submissions", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "scalar", boom)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "degraded"
    assert r.json()["database"] == "unhealthy: database is locked"


class TestIntake:

    def test_public_submission(self, seeded):
        r = seeded.post("/api/submissions", json=SUBMISSION)
        assert r.status_code == 201
        body = r.json()
        assert body["email"] == "amara@example.com"
        assert body["sync_status"] == "pending"

        pending = seeded.get("/api/submissions/pending", headers=bearer("viewer-1"))
        assert pending.status_code == 200
        assert [s["email"] for s in pending.json()] == ["amara@example.com"]

    def test_invalid_email(self, seeded):
        r = seeded.post("/api/submissions", json={**SUBMISSION, "email": "not-an-email"})
        assert r.status_code == 422

    def test_missing_required_field(self, seeded):
        payload = {k: v for k, v in SUBMISSION.items() if k != "category"}
        r = seeded.post("/api/submissions", json=payload)
        assert r.status_code == 422

    def test_pending_requires_auth(self, seeded):
        assert seeded.get("/api/submissions/pending").status_code == 401


class TestDirectory:

    def test_list_and_filter(self, seeded):
        with get_session() as s:
            make_application(s, email="a@example.com", full_name="Ada A", status="approved")
            make_application(s, email="b@example.com", full_name="Ben B")

        r = seeded.get("/api/talent/applications", headers=bearer("viewer-1"))
        assert r.status_code == 200
        assert len(r.json()) == 2

        r = seeded.get(
            "/api/talent/applications",
            params={"status": "approved"},
            headers=bearer("viewer-1"),
        )
        assert [a["email"] for a in r.json()] == ["a@example.com"]

    def test_unknown_status_filter(self, seeded):
        r = seeded.get(
            "/api/talent/applications",
            params={"status": "archived"},
            headers=bearer("viewer-1"),
        )
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_editor_reviews(self, seeded):
        with get_session() as s:
            app_id = make_application(s).id

        r = seeded.patch(
            f"/api/talent/applications/{app_id}",
            json={"status": "approved", "notes": "Strong portfolio"},
            headers=bearer("editor-1"),
        )
        assert r.status_code == 200
        assert r.json()["status"] == "approved"
        assert r.json()["notes"] == "Strong portfolio"

    def test_viewer_cannot_review(self, seeded):
        with get_session() as s:
            app_id = make_application(s).id

        r = seeded.patch(
            f"/api/talent/applications/{app_id}",
            json={"status": "approved"},
            headers=bearer("viewer-1"),
        )
        assert r.status_code == 403

    def test_review_missing_application(self, seeded):
        r = seeded.patch(
            "/api/talent/applications/does-not-exist",
            json={"status": "approved"},
            headers=bearer("admin-1"),
        )
        assert r.status_code == 404

    def test_review_invalid_status(self, seeded):
        with get_session() as s:
            app_id = make_application(s).id

        r = seeded.patch(
            f"/api/talent/applications/{app_id}",
            json={"status": "hired"},
            headers=bearer("admin-1"),
        )
        assert r.status_code == 400

    def test_submit_then_sync_then_list(self, seeded):
        seeded.post("/api/submissions", json=SUBMISSION)
        seeded.post("/functions/talent-sync", headers=bearer("admin-1"))

        r = seeded.get("/api/talent/applications", headers=bearer("viewer-1"))
        [entry] = r.json()
        assert entry["email"] == "amara@example.com"
        assert entry["status"] == "pending"
        assert entry["category_type"] == "model"
        assert entry["social_media"] == {"instagram": "@amara", "telegram": None, "tiktok": None}


class TestUsers:

    def test_me(self, seeded):
        r = seeded.get("/api/users/me", headers=bearer("editor-1", email="ed@example.com"))
        assert r.status_code == 200
        assert r.json() == {"user_id": "editor-1", "email": "ed@example.com", "roles": ["editor"]}

    def test_me_without_role(self, seeded):
        r = seeded.get("/api/users/me", headers=bearer("newcomer"))
        assert r.json()["roles"] == []

    def test_admin_sets_role(self, seeded):
        r = seeded.put(
            "/api/users/newcomer/role",
            json={"role": "editor"},
            headers=bearer("admin-1"),
        )
        assert r.status_code == 200
        assert r.json()["roles"] == ["editor"]

        # the new editor can now run the sync
        with get_session() as s:
            make_submission(s)
        r = seeded.post("/functions/talent-sync", headers=bearer("newcomer"))
        assert r.status_code == 200
        assert r.json()["processed"] == 1

    def test_editor_cannot_set_role(self, seeded):
        r = seeded.put(
            "/api/users/newcomer/role",
            json={"role": "admin"},
            headers=bearer("editor-1"),
        )
        assert r.status_code == 403

    def test_invalid_role(self, seeded):
        r = seeded.put(
            "/api/users/newcomer/role",
            json={"role": "owner"},
            headers=bearer("admin-1"),
        )
        assert r.status_code == 400

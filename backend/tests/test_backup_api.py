"""Admin backup and restore."""

import json
import os

import pytest

from advocatedesk.core.config import settings
from advocatedesk.db import models
from conftest import auth_headers, make_case, make_user


@pytest.fixture()
def admin(db, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "BACKUP_DIR", str(tmp_path / "backups"))
    return make_user(db, "Site Admin", "admin@example.test", roles=("admin",), user_id="ADM")


def test_backup_routes_are_admin_only(client, tenant_a):
    headers = auth_headers(tenant_a["advocate"])
    assert client.post("/api/backup/create", headers=headers).status_code == 403
    assert client.get("/api/backup/list", headers=headers).status_code == 403
    assert client.post("/api/backup/restore", json={"backup_file": "x.json"}, headers=headers).status_code == 403


def test_create_list_and_download(client, db, admin, tenant_a):
    make_case(db, tenant_a["advocate"], tenant_a["client"])
    headers = auth_headers(admin)

    created = client.post("/api/backup/create", headers=headers)
    assert created.status_code == 200
    body = created.json()
    assert body["counts"] == {"users": 4, "cases": 1, "hearings": 0}

    listed = client.get("/api/backup/list", headers=headers).json()["backups"]
    assert [b["filename"] for b in listed] == [body["filename"]]

    download = client.get(f"/api/backup/download/{body['filename']}", headers=headers)
    assert download.status_code == 200
    assert "attachment" in download.headers["content-disposition"]
    payload = download.json()
    assert payload["cases"][0]["case_number"] == "CASE-001"
    assert payload["cases"][0]["status"] == "active"


def test_download_rejects_path_traversal(client, admin):
    headers = auth_headers(admin)
    assert client.get("/api/backup/download/..%2Fsecrets.json", headers=headers).status_code in (400, 404)
    assert client.get("/api/backup/download/missing.json", headers=headers).status_code == 404


def test_restore_replaces_cases_and_keeps_current_user(client, db, admin, tenant_a):
    original = make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-001")
    headers = auth_headers(admin)
    filename = client.post("/api/backup/create", headers=headers).json()["filename"]

    make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-002")
    admin.name = "Renamed Admin"
    db.commit()

    resp = client.post("/api/backup/restore", json={"backup_file": filename}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["restored"]["cases"] == 1

    assert [c.id for c in db.query(models.Case).all()] == [original.id]
    assert db.query(models.User).filter_by(id="ADM").one().name == "Renamed Admin"


def test_restore_remaps_user_ids_by_email(client, db, admin, tenant_a):
    headers = auth_headers(admin)
    path = os.path.join(settings.BACKUP_DIR, "manual.json")
    os.makedirs(settings.BACKUP_DIR, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(
            {
                "version": "1.0",
                "users": [
                    {"id": "OLD-ADV", "name": "Advocate A", "email": "a@firm-a.test", "roles": ["advocate"],
                     "is_main_advocate": True, "is_active": True, "email_verified": False},
                    {"id": "NEW-C", "name": "New Client", "email": "new@example.test", "roles": ["client"],
                     "advocate_id": "OLD-ADV", "is_main_advocate": False, "is_active": True,
                     "email_verified": False},
                ],
                "cases": [
                    {"id": "K1", "advocate_id": "OLD-ADV", "client_id": "NEW-C", "created_by": "OLD-ADV",
                     "case_number": "R-1", "title": "Restored", "case_type": "civil", "status": "active",
                     "priority": "medium", "registration_date": "2024-02-01T00:00:00",
                     "notes": [{"id": "N1", "case_id": "K1", "content": "kept", "is_private": False,
                                "created_by": "OLD-ADV"}]},
                ],
                "hearings": [],
            },
            fh,
        )

    resp = client.post("/api/backup/restore", json={"backup_file": "manual.json"}, headers=headers)
    assert resp.status_code == 200

    restored = db.query(models.Case).filter_by(id="K1").one()
    # Ids are remapped onto the live account with the same email.
    assert restored.advocate_id == "A1"
    new_client = db.query(models.User).filter_by(email="new@example.test").one()
    assert new_client.advocate_id == "A1"
    assert restored.client_id == new_client.id
    assert db.query(models.CaseNote).filter_by(case_id="K1").count() == 1


def test_restoring_same_backup_twice_keeps_one_copy_of_each_case(client, db, admin, tenant_a, tenant_b):
    first = make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-001")
    second = make_case(db, tenant_b["advocate"], tenant_b["client"], "B-001")
    headers = auth_headers(admin)
    filename = client.post("/api/backup/create", headers=headers).json()["filename"]

    for _ in range(2):
        resp = client.post("/api/backup/restore", json={"backup_file": filename}, headers=headers)
        assert resp.status_code == 200

    assert sorted(c.id for c in db.query(models.Case).all()) == sorted([first.id, second.id])
    assert db.query(models.User).count() == 6

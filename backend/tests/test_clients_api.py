"""Client endpoints: creation, dependents check and cascading delete."""

import pytest

from advocatedesk.core.security import verify_password
from advocatedesk.db import models
from conftest import auth_headers, make_case, make_user


def test_create_client_generates_account_and_sends_credentials(client, db, notifier, tenant_a):
    resp = client.post(
        "/api/clients",
        json={"name": "Meera Nair", "email": "Meera@Example.test", "phone": "9800000000"},
        headers=auth_headers(tenant_a["advocate"]),
    )
    assert resp.status_code == 201
    assert resp.json()["created"] is True

    user = db.query(models.User).filter_by(email="meera@example.test").one()
    assert user.roles == ["client"]
    assert user.advocate_id == "A1"
    assert user.password_hash

    assert len(notifier.sent) == 1
    message = notifier.sent[0]
    assert message["to"] == "meera@example.test"
    # The emailed password is the one that was hashed.
    password = message["html"].split("Temporary password: <strong>")[1].split("</strong>")[0]
    assert verify_password(password, user.password_hash)


def test_create_client_requires_name_and_email(client, tenant_a):
    resp = client.post("/api/clients", json={"name": "No Email"}, headers=auth_headers(tenant_a["advocate"]))
    assert resp.status_code == 400


def test_existing_tenant_user_gains_client_role(client, db, notifier, tenant_a):
    member = tenant_a["member"]
    resp = client.post(
        "/api/clients",
        json={"name": member.name, "email": member.email},
        headers=auth_headers(tenant_a["advocate"]),
    )
    assert resp.status_code == 201
    assert resp.json()["created"] is False
    db.refresh(member)
    assert set(member.roles) == {"team_member", "client"}
    assert notifier.sent == []


def test_existing_user_of_other_tenant_conflicts(client, tenant_a, tenant_b):
    resp = client.post(
        "/api/clients",
        json={"name": "Client Two", "email": tenant_b["client"].email},
        headers=auth_headers(tenant_a["advocate"]),
    )
    assert resp.status_code == 409


def test_list_clients_with_case_counts(client, db, tenant_a, tenant_b):
    make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-001")
    make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-002", status=models.CaseStatus.closed)

    body = client.get("/api/clients", headers=auth_headers(tenant_a["advocate"])).json()
    assert [c["id"] for c in body["clients"]] == ["C1"]
    assert body["clients"][0]["total_cases"] == 2
    assert body["clients"][0]["active_cases"] == 1

    other = client.get(f"/api/clients/{tenant_a['client'].id}", headers=auth_headers(tenant_b["advocate"]))
    assert other.status_code == 404


@pytest.mark.parametrize("status", ["active", "pending", "on_hold"])
def test_delete_blocked_by_open_case(client, db, store, tenant_a, status):
    make_case(db, tenant_a["advocate"], tenant_a["client"], status=models.CaseStatus(status))
    store.put("profiles/C1/avatar.png")

    resp = client.delete("/api/clients/C1", headers=auth_headers(tenant_a["advocate"]))
    assert resp.status_code == 400
    assert db.query(models.User).filter_by(id="C1").count() == 1
    assert db.query(models.Case).count() == 1
    assert "profiles/C1/avatar.png" in store.objects


def test_delete_cascades_cases_files_and_notifies(client, db, store, notifier, tenant_a):
    first = make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-001", status=models.CaseStatus.closed)
    second = make_case(db, tenant_a["advocate"], tenant_a["client"], "CASE-002", status=models.CaseStatus.settled)
    store.put(f"cases/{first.id}/1_a.pdf")
    store.put(f"cases/{second.id}/1_b.pdf")
    store.put("profiles/C1/me.png")
    store.put("avatars/C1/old.png")
    store.put("cases/unrelated/keep.pdf")

    resp = client.delete("/api/clients/C1", headers=auth_headers(tenant_a["advocate"]))
    assert resp.status_code == 200
    body = resp.json()
    assert body["deleted_cases"] == 2
    assert body["cleanup"] == {"deleted_count": 4, "errors": []}

    assert db.query(models.User).filter_by(id="C1").count() == 0
    assert db.query(models.Case).count() == 0
    assert list(store.objects) == ["cases/unrelated/keep.pdf"]
    assert notifier.sent[-1]["to"] == "c1@example.test"


def test_delete_reports_partial_cleanup_failure(client, db, store, tenant_a):
    case = make_case(db, tenant_a["advocate"], tenant_a["client"], status=models.CaseStatus.dismissed)
    store.put(f"cases/{case.id}/1_a.pdf")
    store.put(f"cases/{case.id}/2_b.pdf")
    store.fail_delete.add(f"cases/{case.id}/2_b.pdf")

    resp = client.delete("/api/clients/C1", headers=auth_headers(tenant_a["advocate"]))
    assert resp.status_code == 200
    cleanup = resp.json()["cleanup"]
    assert cleanup["deleted_count"] == 1
    assert len(cleanup["errors"]) == 1
    assert db.query(models.User).filter_by(id="C1").count() == 0


def test_delete_other_tenant_client_is_not_found(client, db, tenant_a, tenant_b):
    resp = client.delete("/api/clients/C1", headers=auth_headers(tenant_b["advocate"]))
    assert resp.status_code == 404
    assert db.query(models.User).filter_by(id="C1").count() == 1


def test_update_client(client, tenant_a):
    resp = client.put(
        "/api/clients/C1",
        json={"phone": "9811111111", "is_active": False},
        headers=auth_headers(tenant_a["advocate"]),
    )
    assert resp.status_code == 200
    assert resp.json()["client"]["phone"] == "9811111111"
    assert resp.json()["client"]["is_active"] is False

    inactive = client.get("/api/clients", params={"status": "inactive"}, headers=auth_headers(tenant_a["advocate"]))
    assert [c["id"] for c in inactive.json()["clients"]] == ["C1"]


def test_team_member_listing_is_tenant_scoped(client, db, tenant_a, tenant_b):
    make_user(db, "Clerk B", "clerk@firm-b.test", roles=("team_member",), advocate_id=tenant_b["advocate"].id)
    body = client.get("/api/team", headers=auth_headers(tenant_a["advocate"])).json()
    assert [m["email"] for m in body["members"]] == ["clerk@firm-a.test"]

"""Own profile and avatar endpoints."""

from conftest import auth_headers


def _avatar(client, headers, data=b"\x89PNG fake", content_type="image/png", name="me.png"):
    return client.post("/api/profile/avatar", files={"file": (name, data, content_type)}, headers=headers)


def test_update_profile_and_email_conflict(client, tenant_a, tenant_b):
    headers = auth_headers(tenant_a["advocate"])

    updated = client.put("/api/profile", json={"phone": "9822222222", "company_name": "Rao & Co"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["user"]["company_name"] == "Rao & Co"

    clash = client.put("/api/profile", json={"email": "b@firm-b.test"}, headers=headers)
    assert clash.status_code == 409

    moved = client.put("/api/profile", json={"email": "New@Firm-A.test"}, headers=headers)
    assert moved.json()["user"]["email"] == "new@firm-a.test"


def test_avatar_rejects_non_images_and_large_files(client, store, tenant_a):
    headers = auth_headers(tenant_a["client"])

    assert _avatar(client, headers, content_type="application/pdf", name="me.pdf").status_code == 400
    assert _avatar(client, headers, data=b"0" * (2 * 1024 * 1024 + 1)).status_code == 400
    assert store.saved == []


def test_avatar_upload_replaces_previous_image(client, db, store, tenant_a):
    user = tenant_a["client"]
    headers = auth_headers(user)

    first = _avatar(client, headers)
    assert first.status_code == 200
    [first_key] = store.saved
    assert first_key.startswith("profiles/C1/")
    assert first_key.endswith(".png")

    second = _avatar(client, headers, content_type="image/jpeg", name="me.jpeg")
    assert second.status_code == 200
    assert first_key not in store.objects
    db.refresh(user)
    assert user.profile_image_path == store.saved[1]

    url = client.get("/api/profile/avatar", headers=headers).json()["url"]
    assert url.startswith(f"https://signed.example/{store.saved[1]}")


def test_delete_avatar(client, db, store, tenant_a):
    user = tenant_a["client"]
    headers = auth_headers(user)
    _avatar(client, headers)

    assert client.delete("/api/profile/avatar", headers=headers).status_code == 200
    assert store.objects == {}
    assert client.get("/api/profile/avatar", headers=headers).json() == {"url": None}

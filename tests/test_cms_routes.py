import pytest

from tests.conftest import ADMIN_PASSWORD, ADMIN_USERNAME


async def create_images(admin_client, n):
    ids = []
    for i in range(n):
        response = await admin_client.post(
            "/api/cms/images",
            json={"src": f"https://cdn.example.com/{i}.jpg", "caption": f"Image {i}"},
        )
        ids.append(response.json()["id"])
    return ids


@pytest.mark.parametrize("method,path", [
    ("GET", "/api/cms/images"),
    ("POST", "/api/cms/images"),
    ("PUT", "/api/cms/images/reorder"),
    ("DELETE", "/api/cms/images/1"),
    ("GET", "/api/cms/images/integrity"),
    ("POST", "/api/cms/images/repair-order"),
    ("GET", "/api/auth/me"),
])
async def test_admin_routes_require_token(client, method, path):
    response = await client.request(method, path)

    assert response.status_code == 401
    assert response.json()["error"] == "Missing token"


async def test_invalid_token_rejected(client):
    response = await client.get("/api/cms/images", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"


async def test_login_with_wrong_password(client):
    response = await client.post(
        "/api/auth/login", json={"username": ADMIN_USERNAME, "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


async def test_login_with_wrong_username(client):
    response = await client.post(
        "/api/auth/login", json={"username": "someone", "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 401


async def test_login_sets_cookie(client):
    response = await client.post(
        "/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert "cms_token=" in response.headers["set-cookie"]
    assert "HttpOnly" in response.headers["set-cookie"]


async def test_me_returns_admin_profile(admin_client):
    response = await admin_client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json() == {"name": ADMIN_USERNAME, "avatar_url": "/images/logo.jpg"}


async def test_create_image(admin_client):
    response = await admin_client.post(
        "/api/cms/images",
        json={"src": "https://cdn.example.com/a.jpg", "caption": "First", "alt": "A first image"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["order"] == 0
    assert body["alt"] == "A first image"
    assert body["likes"] == 0


async def test_create_image_requires_src_and_caption(admin_client):
    response = await admin_client.post("/api/cms/images", json={"src": "", "caption": "x"})
    assert response.status_code == 400

    response = await admin_client.post("/api/cms/images", json={"src": "https://cdn.example.com/a.jpg"})
    assert response.status_code == 400


async def test_list_all_in_order_with_revision(admin_client):
    ids = await create_images(admin_client, 3)

    response = await admin_client.get("/api/cms/images")

    assert response.status_code == 200
    body = response.json()
    assert [img["id"] for img in body["images"]] == ids
    assert body["revision"] == 3


async def test_reorder(admin_client):
    ids = await create_images(admin_client, 4)
    revision = (await admin_client.get("/api/cms/images")).json()["revision"]
    new_order = [ids[2], ids[0], ids[3], ids[1]]

    response = await admin_client.put(
        "/api/cms/images/reorder", json={"image_ids": new_order, "revision": revision}
    )

    assert response.status_code == 200
    assert response.json()["count"] == 4
    assert response.json()["revision"] == revision + 1

    images = (await admin_client.get("/api/images", params={"page_size": 10})).json()["images"]
    assert [img["id"] for img in images] == new_order
    assert [img["order"] for img in images] == [0, 1, 2, 3]


async def test_reorder_rejects_partial_list(admin_client):
    ids = await create_images(admin_client, 3)

    response = await admin_client.put("/api/cms/images/reorder", json={"image_ids": ids[:2]})

    assert response.status_code == 400
    assert response.json()["detail"]["missing"] == [ids[2]]


async def test_reorder_rejects_stale_revision(admin_client):
    ids = await create_images(admin_client, 2)

    response = await admin_client.put(
        "/api/cms/images/reorder", json={"image_ids": ids[::-1], "revision": 0}
    )

    assert response.status_code == 409


async def test_delete_reindexes(admin_client):
    ids = await create_images(admin_client, 4)

    response = await admin_client.delete(f"/api/cms/images/{ids[1]}")

    assert response.status_code == 200
    assert response.json()["image_id"] == ids[1]
    images = (await admin_client.get("/api/cms/images")).json()["images"]
    assert [(img["id"], img["order"]) for img in images] == [(ids[0], 0), (ids[2], 1), (ids[3], 2)]


async def test_delete_unknown_image(admin_client):
    response = await admin_client.delete("/api/cms/images/999")

    assert response.status_code == 404


async def test_integrity_and_repair(admin_client):
    await create_images(admin_client, 3)

    report = (await admin_client.get("/api/cms/images/integrity")).json()
    assert report == {"total": 3, "is_dense": True, "gaps": [], "duplicates": []}

    response = await admin_client.post("/api/cms/images/repair-order")
    assert response.status_code == 200
    assert response.json()["updated"] == 0


async def test_logout_clears_cookie(client):
    response = await client.post("/api/auth/logout")

    assert response.status_code == 200
    assert "cms_token=" in response.headers["set-cookie"]


async def test_delete_id_beyond_key_range(admin_client):
    await create_images(admin_client, 2)

    response = await admin_client.delete(f"/api/cms/images/{2 ** 63}")

    assert response.status_code == 404
    images = (await admin_client.get("/api/cms/images")).json()["images"]
    assert [img["order"] for img in images] == [0, 1]


async def test_reorder_rejects_duplicate_ids(admin_client):
    ids = await create_images(admin_client, 2)

    response = await admin_client.put(
        "/api/cms/images/reorder", json={"image_ids": [ids[0], ids[0], ids[1]]}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"

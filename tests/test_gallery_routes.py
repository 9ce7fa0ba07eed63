async def create_images(admin_client, n):
    ids = []
    for i in range(n):
        response = await admin_client.post(
            "/api/cms/images",
            json={"src": f"https://cdn.example.com/{i}.jpg", "caption": f"Image {i}"},
        )
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_feed_pages(admin_client):
    await create_images(admin_client, 10)

    response = await admin_client.get("/api/images", params={"page": 1, "page_size": 4})
    assert response.status_code == 200
    body = response.json()
    assert [img["order"] for img in body["images"]] == [0, 1, 2, 3]
    assert body["has_more"] is True
    assert body["total"] == 10

    body = (await admin_client.get("/api/images", params={"page": 3, "page_size": 4})).json()
    assert [img["order"] for img in body["images"]] == [8, 9]
    assert body["has_more"] is False


async def test_feed_out_of_range_page(admin_client):
    await create_images(admin_client, 10)

    response = await admin_client.get("/api/images", params={"page": 100, "page_size": 4})

    assert response.status_code == 200
    assert response.json()["images"] == []
    assert response.json()["has_more"] is False


async def test_feed_defaults_to_page_size_four(client):
    response = await client.get("/api/images")

    assert response.status_code == 200
    body = response.json()
    assert body["page"] == 1
    assert body["page_size"] == 4
    assert body["images"] == []


async def test_feed_rejects_bad_page(client):
    response = await client.get("/api/images", params={"page": 0})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input"


async def test_feed_image_shape(admin_client):
    await admin_client.post(
        "/api/cms/images",
        json={"src": "https://cdn.example.com/a.jpg", "caption": "Dusk", "hashtags": ["#city"]},
    )

    image = (await admin_client.get("/api/images")).json()["images"][0]

    assert image["alt"] == "Dusk"
    assert image["hashtags"] == ["city"]
    assert image["likes"] == 0
    assert image["uploader"] == {"name": "admin", "avatar_url": "/images/logo.jpg"}
    assert "created_at" in image


async def test_like_is_public_and_monotonic(admin_client, client):
    [image_id] = await create_images(admin_client, 1)
    client.headers.pop("Authorization", None)

    for expected in (1, 2, 3):
        response = await client.post(f"/api/images/{image_id}/like")
        assert response.status_code == 200
        assert response.json() == {"id": image_id, "likes": expected}


async def test_like_unknown_image(client):
    response = await client.post("/api/images/12345/like")

    assert response.status_code == 404
    assert response.json()["error"] == "Image not found"


async def test_visitor_counter(client):
    assert (await client.get("/api/visitors")).json() == {"count": 0}

    assert (await client.post("/api/visitors")).json() == {"count": 1}
    assert (await client.post("/api/visitors")).json() == {"count": 2}

    assert (await client.get("/api/visitors")).json() == {"count": 2}


async def test_like_id_beyond_key_range(client):
    response = await client.post(f"/api/images/{2 ** 63}/like")

    assert response.status_code == 404
    assert response.json()["error"] == "Image not found"

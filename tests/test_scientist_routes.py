from pathlib import Path

from tests.helpers import make_image_bytes, make_oversized_png

API = "/api/scientists"


def _create(client, png_bytes, name="Marie Curie", subject="Physics", filename="curie.png", **extra):
    data = {"name": name, "subject": subject, **extra}
    return client.post(API, data=data, files={"image": (filename, png_bytes, "image/png")})


def _media_files(settings):
    return sorted(p for p in Path(settings.media_dir).rglob("*") if p.is_file())


def test_list_empty(client):
    response = client.get(API)
    assert response.status_code == 200
    assert response.json() == []


def test_create_without_image_is_rejected(client, settings):
    response = client.post(API, data={"name": "Marie Curie", "subject": "Physics"})
    assert response.status_code == 400
    assert "image" in response.json()["message"].lower()
    assert client.get(API).json() == []


def test_create_with_image_returns_derived_urls(client, png_bytes):
    response = _create(client, png_bytes)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Marie Curie"
    assert body["id"]
    assert body["color"].startswith("#")
    assert body["image"].startswith("http://testserver/media/image/upload/scientists/")
    assert body["thumbnail"]
    assert body["image"] != body["thumbnail"]
    assert "c_fill,h_200,q_80,w_200" in body["thumbnail"]


def test_create_missing_field_does_not_store_upload(client, settings, png_bytes):
    response = _create(client, png_bytes, subject="")
    assert response.status_code == 400
    assert _media_files(settings) == []


def test_wrong_extension_rejected(client, settings, png_bytes):
    response = _create(client, png_bytes, filename="notes.txt")
    assert response.status_code == 400
    assert _media_files(settings) == []


def test_oversized_upload_rejected(client, settings):
    big = b"\x89PNG" + b"0" * (5 * 1024 * 1024)
    response = _create(client, big)
    assert response.status_code == 400
    assert _media_files(settings) == []


def test_undecodable_image_rejected(client, settings):
    response = _create(client, b"definitely not an image", filename="fake.jpg")
    assert response.status_code == 400
    assert _media_files(settings) == []


def test_oversized_pixel_count_rejected(client, settings):
    response = _create(client, make_oversized_png(), filename="huge.png")
    assert response.status_code == 400
    assert _media_files(settings) == []


def test_get_by_id_and_not_found(client, png_bytes):
    created = _create(client, png_bytes).json()
    response = client.get(f"{API}/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created

    missing = client.get(f"{API}/nope")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Scientist not found"


def test_list_newest_first(client, png_bytes):
    first = _create(client, png_bytes, name="Newton").json()
    second = _create(client, png_bytes, name="Darwin").json()
    assert [s["id"] for s in client.get(API).json()] == [second["id"], first["id"]]


def test_patch_fields_only(client, png_bytes):
    created = _create(client, png_bytes).json()
    response = client.patch(f"{API}/{created['id']}", data={"title": "Nobel laureate", "deathYear": "1934"})
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Nobel laureate"
    assert body["deathYear"] == 1934
    assert body["name"] == created["name"]
    assert body["image"] == created["image"]
    assert body["thumbnail"] == created["thumbnail"]


def test_patch_invalid_year(client, png_bytes):
    created = _create(client, png_bytes).json()
    response = client.patch(f"{API}/{created['id']}", data={"birthYear": "long ago"})
    assert response.status_code == 400


def test_patch_replaces_image_and_removes_old_file(client, settings, png_bytes):
    created = _create(client, png_bytes).json()
    assert len(_media_files(settings)) == 1

    jpeg = make_image_bytes(fmt="JPEG")
    response = client.patch(
        f"{API}/{created['id']}", files={"image": ("new.jpg", jpeg, "image/jpeg")}
    )
    assert response.status_code == 200
    assert response.json()["image"] != created["image"]
    assert len(_media_files(settings)) == 1


def test_patch_missing_record_stores_nothing(client, settings, png_bytes):
    response = client.patch(f"{API}/missing", files={"image": ("a.png", png_bytes, "image/png")})
    assert response.status_code == 404
    assert _media_files(settings) == []


def test_delete(client, settings, png_bytes):
    created = _create(client, png_bytes).json()
    response = client.delete(f"{API}/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Scientist deleted"}
    assert _media_files(settings) == []
    assert client.get(f"{API}/{created['id']}").status_code == 404
    assert client.delete(f"{API}/{created['id']}").status_code == 404


def test_derived_urls_are_served(client, png_bytes):
    created = _create(client, png_bytes).json()
    path = created["thumbnail"].replace("http://testserver", "")
    response = client.get(path)
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] is True

from __future__ import annotations

import base64
from pathlib import Path

from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PXZo0wAAAABJRU5ErkJggg=="
)


def _stored_files(settings: Settings) -> list[Path]:
    return sorted(Path(settings.image_dir).iterdir())


def test_admin_upload_stores_file_and_serves_it(admin_client: TestClient, settings: Settings) -> None:
    response = admin_client.post(
        "/api/upload/image",
        files={"image": ("swatch.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["filename"].startswith("image-")
    assert body["filename"].endswith(".png")
    assert body["imageUrl"] == f"/generated_images/{body['filename']}"
    assert (Path(settings.image_dir) / body["filename"]).read_bytes() == PNG_BYTES

    served = admin_client.get(body["imageUrl"])
    assert served.status_code == 200
    assert served.headers["content-type"].startswith("image/png")
    assert served.content == PNG_BYTES


def test_uploaded_url_can_be_used_as_product_image(admin_client: TestClient) -> None:
    upload = admin_client.post("/api/upload/image", files={"image": ("swatch.webp", b"RIFF0000WEBP", "image/webp")})
    image_url = upload.json()["imageUrl"]

    created = admin_client.post(
        "/api/products",
        json={"name": "Drill", "description": "Workwear drill", "price": 410, "category": "Staff Uniforms", "image": image_url},
    )

    assert created.status_code == 201
    assert created.json()["image"] == image_url


def test_upload_rejects_non_images(admin_client: TestClient, settings: Settings) -> None:
    response = admin_client.post(
        "/api/upload/image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert _stored_files(settings) == []


def test_upload_rejects_mismatched_extension(admin_client: TestClient, settings: Settings) -> None:
    response = admin_client.post(
        "/api/upload/image",
        files={"image": ("script.exe", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400
    assert _stored_files(settings) == []


def test_upload_without_file_is_400(admin_client: TestClient) -> None:
    response = admin_client.post("/api/upload/image", data={"other": "field"})
    assert response.status_code == 400


def test_upload_over_size_limit_is_rejected(tmp_path: Path) -> None:
    settings = Settings(debug=False, configure_logging=False, image_dir=str(tmp_path / "img"), max_upload_bytes=16)
    with TestClient(create_app(settings)) as client:
        client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        response = client.post(
            "/api/upload/image",
            files={"image": ("big.png", b"\x89PNG" + b"0" * 64, "image/png")},
        )

    assert response.status_code == 400
    assert "too large" in response.json()["detail"]
    assert response.json()["error"] == response.json()["detail"]
    assert _stored_files(settings) == []


def test_unauthorized_upload_leaves_no_file(client: TestClient, settings: Settings) -> None:
    response = client.post(
        "/api/upload/image",
        files={"image": ("swatch.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 401
    assert _stored_files(settings) == []


def test_upload_accepts_legacy_jpg_content_type(admin_client: TestClient, settings: Settings) -> None:
    response = admin_client.post(
        "/api/upload/image",
        files={"image": ("a.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpg")},
    )

    assert response.status_code == 200
    assert response.json()["filename"].endswith(".jpg")
    assert len(_stored_files(settings)) == 1


def test_upload_rejects_content_type_that_contradicts_extension(admin_client: TestClient, settings: Settings) -> None:
    response = admin_client.post(
        "/api/upload/image",
        files={"image": ("swatch.gif", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "File type does not match its extension"
    assert _stored_files(settings) == []

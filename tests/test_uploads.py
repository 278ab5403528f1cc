"""
Tests for image uploads and stored object serving.
"""
import io

from PIL import Image


def _image(width, height, fmt="PNG"):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (20, 120, 220)).save(buffer, format=fmt)
    return buffer.getvalue()


class TestUploadEndpoints:
    """Test the post image upload endpoint."""

    def test_upload_small_image_untouched(self, client, auth_headers):
        data = _image(300, 200)
        response = client.post(
            "/api/uploads/images",
            headers=auth_headers,
            files={"file": ("small.png", data, "image/png")},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["width"] == 300
        assert body["height"] == 200
        assert body["size"] == len(data)
        assert body["path"].endswith(".png")
        assert body["url"] == f"http://testserver/storage/post-images/{body['path']}"

    def test_upload_large_image_is_resized(self, client, auth_headers, blob_storage):
        response = client.post(
            "/api/uploads/images",
            headers=auth_headers,
            files={"file": ("big.jpg", _image(3840, 1080, "JPEG"), "image/jpeg")},
        )
        assert response.status_code == 201
        body = response.json()
        assert (body["width"], body["height"]) == (1920, 540)
        assert body["path"].endswith(".jpg")

        with Image.open(blob_storage.resolve("post-images", body["path"])) as img:
            assert img.size == (1920, 540)

    def test_uploaded_image_is_served(self, client, auth_headers):
        data = _image(10, 10)
        body = client.post(
            "/api/uploads/images",
            headers=auth_headers,
            files={"file": ("tiny.png", data, "image/png")},
        ).json()

        response = client.get(f"/storage/post-images/{body['path']}")
        assert response.status_code == 200
        assert response.content == data

    def test_upload_rejects_unsupported_type(self, client, auth_headers):
        response = client.post(
            "/api/uploads/images",
            headers=auth_headers,
            files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 422

    def test_upload_rejects_corrupt_image(self, client, auth_headers):
        response = client.post(
            "/api/uploads/images",
            headers=auth_headers,
            files={"file": ("broken.png", b"not an image", "image/png")},
        )
        assert response.status_code == 422

    def test_upload_requires_auth(self, client):
        response = client.post(
            "/api/uploads/images",
            files={"file": ("small.png", _image(5, 5), "image/png")},
        )
        assert response.status_code == 401

    def test_missing_object(self, client):
        assert client.get("/storage/post-images/nothing.png").status_code == 404

    def test_unknown_bucket(self, client):
        assert client.get("/storage/secrets/file.png").status_code == 404

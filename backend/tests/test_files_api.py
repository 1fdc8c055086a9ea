"""HTTP tests for the /files endpoints."""

import pytest

from files_manager.models.processing_job import ProcessingJob
from files_manager.repositories.file_repository import PAGE_SIZE
from tests.factories import b64, make_upload


def _create(client, headers, **payload):
    response = client.post("/files", json=make_upload(**payload), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthRequired:

    @pytest.mark.parametrize("method,path", [
        ("post", "/files"),
        ("get", "/files"),
        ("get", "/files/abc"),
        ("put", "/files/abc/publish"),
        ("put", "/files/abc/unpublish"),
    ])
    def test_no_token(self, client, method, path):
        kwargs = {"json": make_upload()} if method == "post" else {}
        response = getattr(client, method)(path, **kwargs)
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_unknown_token(self, client):
        response = client.get("/files", headers={"X-Token": "forged"})
        assert response.status_code == 401


class TestUpload:

    def test_created_projection(self, client, auth_headers, user):
        body = _create(client, auth_headers, isPublic=True)
        assert body["userId"] == user.user_id
        assert body["name"] == "notes.txt"
        assert body["type"] == "file"
        assert body["isPublic"] is True
        assert body["parentId"] == 0
        assert "localPath" not in body
        assert "local_path" not in body

    def test_defaults_to_private(self, client, auth_headers):
        assert _create(client, auth_headers)["isPublic"] is False

    @pytest.mark.parametrize("payload,message", [
        ({"name": None}, "Missing name"),
        ({"type": None}, "Missing type"),
        ({"type": "spreadsheet"}, "Missing type"),
        ({"data": None}, "Missing data"),
        ({"data": "%%%"}, "Invalid data"),
        ({"type": 5}, "Missing type"),
        ({"name": 123}, "Missing name"),
        ({"data": ["aGVsbG8="]}, "Missing data"),
    ])
    def test_validation_messages(self, client, auth_headers, payload, message):
        body = make_upload()
        for key, value in payload.items():
            if value is None:
                body.pop(key, None)
            else:
                body[key] = value
        response = client.post("/files", json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == message

    def test_unknown_parent(self, client, auth_headers):
        response = client.post("/files", json=make_upload(parentId="missing"), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Parent not found"

    def test_parent_is_a_file(self, client, auth_headers):
        plain = _create(client, auth_headers)
        response = client.post("/files", json=make_upload(parentId=plain["id"]), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Parent is not a folder"

    def test_parent_zero_is_top_level(self, client, auth_headers):
        assert _create(client, auth_headers, parentId=0)["parentId"] == 0
        assert _create(client, auth_headers, parentId="0")["parentId"] == 0

    def test_folder_needs_no_data(self, client, auth_headers):
        body = _create(client, auth_headers, name="docs", type="folder", data=None)
        assert body["type"] == "folder"


class TestImageScenario:

    def test_folder_then_image(self, client, auth_headers, user, db):
        folder = _create(client, auth_headers, name="F", type="folder", data=None)
        image = _create(
            client, auth_headers,
            name="I.png", type="image", data="aGVsbG8=", parentId=folder["id"],
        )
        assert image["parentId"] == folder["id"]

        jobs = db.query(ProcessingJob).all()
        assert len(jobs) == 1
        assert jobs[0].user_id == user.user_id
        assert jobs[0].file_id == image["id"]

        response = client.get(f"/files/{image['id']}/data", headers=auth_headers)
        assert response.status_code == 200
        assert response.content == b"hello"
        assert response.headers["content-type"] == "image/png"


class TestShow:

    def test_owner_sees_record(self, client, auth_headers):
        created = _create(client, auth_headers)
        response = client.get(f"/files/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == created

    def test_other_user_gets_not_found(self, client, auth_headers, other_headers):
        created = _create(client, auth_headers, isPublic=True)
        response = client.get(f"/files/{created['id']}", headers=other_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Not found"

    def test_unknown_id(self, client, auth_headers):
        assert client.get("/files/nope", headers=auth_headers).status_code == 404


class TestIndex:

    def test_pages_of_twenty(self, client, auth_headers):
        for i in range(PAGE_SIZE + 1):
            _create(client, auth_headers, name=f"n{i}.txt")

        first = client.get("/files", headers=auth_headers).json()
        second = client.get("/files", params={"page": 1}, headers=auth_headers).json()
        assert len(first) == PAGE_SIZE
        assert [r["name"] for r in second] == [f"n{PAGE_SIZE}.txt"]

    @pytest.mark.parametrize("page", ["-1", "abc"])
    def test_bad_page_is_first_page(self, client, auth_headers, page):
        created = _create(client, auth_headers)
        listed = client.get("/files", params={"page": page}, headers=auth_headers).json()
        assert [r["id"] for r in listed] == [created["id"]]

    def test_parent_filter(self, client, auth_headers):
        folder = _create(client, auth_headers, name="F", type="folder", data=None)
        child = _create(client, auth_headers, parentId=folder["id"])

        inside = client.get("/files", params={"parentId": folder["id"]}, headers=auth_headers).json()
        top = client.get("/files", params={"parentId": 0}, headers=auth_headers).json()
        assert [r["id"] for r in inside] == [child["id"]]
        assert [r["id"] for r in top] == [folder["id"]]

    def test_only_own_records(self, client, auth_headers, other_headers):
        _create(client, other_headers, isPublic=True)
        assert client.get("/files", headers=auth_headers).json() == []


class TestVisibility:

    def test_publish_then_unpublish(self, client, auth_headers):
        created = _create(client, auth_headers)
        published = client.put(f"/files/{created['id']}/publish", headers=auth_headers)
        assert published.status_code == 200
        assert published.json()["isPublic"] is True

        unpublished = client.put(f"/files/{created['id']}/unpublish", headers=auth_headers)
        assert unpublished.json()["isPublic"] is False

    def test_other_user_cannot_publish(self, client, auth_headers, other_headers):
        created = _create(client, auth_headers)
        response = client.put(f"/files/{created['id']}/publish", headers=other_headers)
        assert response.status_code == 404

        again = client.get(f"/files/{created['id']}", headers=auth_headers).json()
        assert again["isPublic"] is False


class TestData:

    def test_private_content_owner_only(self, client, auth_headers, other_headers):
        created = _create(client, auth_headers, data=b64(b"mine"))
        url = f"/files/{created['id']}/data"

        assert client.get(url, headers=auth_headers).content == b"mine"
        assert client.get(url, headers=other_headers).status_code == 404
        assert client.get(url).status_code == 404

    def test_public_content_anonymous(self, client, auth_headers):
        created = _create(client, auth_headers, isPublic=True, data=b64(b"shared"))
        response = client.get(f"/files/{created['id']}/data")
        assert response.status_code == 200
        assert response.content == b"shared"
        assert response.headers["content-type"].startswith("text/plain")

    def test_invalid_token_on_public_content(self, client, auth_headers):
        created = _create(client, auth_headers, isPublic=True)
        response = client.get(f"/files/{created['id']}/data", headers={"X-Token": "stale"})
        assert response.status_code == 200

    def test_folder_has_no_content(self, client, auth_headers):
        folder = _create(client, auth_headers, name="docs", type="folder", data=None)
        response = client.get(f"/files/{folder['id']}/data", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "A folder doesn't have content"

    def test_bytes_removed_from_disk(self, client, auth_headers, storage_root):
        created = _create(client, auth_headers)
        for path in storage_root.iterdir():
            path.unlink()
        response = client.get(f"/files/{created['id']}/data", headers=auth_headers)
        assert response.status_code == 404

    def test_unknown_extension(self, client, auth_headers):
        created = _create(client, auth_headers, name="blob")
        response = client.get(f"/files/{created['id']}/data", headers=auth_headers)
        assert response.headers["content-type"] == "application/octet-stream"

    def test_size_parameter_accepted(self, client, auth_headers):
        created = _create(client, auth_headers)
        response = client.get(
            f"/files/{created['id']}/data", params={"size": 500}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.content == b"hello"

# Tests for the file manager HTTP API.

import io
import re
import zipfile

from helpers import write_tree

API = "/api/filemanager"


class TestHealth:
    def test_health(self, client, root):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "root": str(root)}


class TestBrowse:
    def test_browse_root(self, client, root):
        write_tree(root, {"sub": None, "a.txt": b"abc"})

        resp = client.get(f"{API}/browse")

        assert resp.status_code == 200
        data = resp.json()
        assert data["currentPath"] == ""
        assert [item["name"] for item in data["items"]] == ["sub", "a.txt"]
        file_item = data["items"][1]
        assert file_item["relativePath"] == "a.txt"
        assert file_item["isDirectory"] is False
        assert file_item["sizeBytes"] == 3
        assert file_item["extension"] == ".txt"
        assert "lastModifiedUtc" in file_item

    def test_browse_normalizes_current_path(self, client, root):
        write_tree(root, {"docs/inner": None})

        resp = client.get(f"{API}/browse", params={"path": "/docs/inner/../"})

        assert resp.json()["currentPath"] == "docs"

    def test_browse_escape_is_bad_request(self, client):
        resp = client.get(f"{API}/browse", params={"path": "../"})
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_browse_missing_is_not_found(self, client):
        resp = client.get(f"{API}/browse", params={"path": "nope"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Directory not found"}


class TestSearch:
    def test_search(self, client, root):
        write_tree(root, {"report.txt": b"r", "sub/Report2.txt": b"r", "other.txt": b"o"})

        resp = client.get(f"{API}/search", params={"query": "rep"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["query"] == "rep"
        assert sorted(item["name"] for item in data["results"]) == ["Report2.txt", "report.txt"]

    def test_search_flags(self, client, root):
        write_tree(root, {"reports": None, "report.txt": b"r"})

        resp = client.get(f"{API}/search", params={"query": "rep", "includeFiles": "false"})

        assert [item["name"] for item in resp.json()["results"]] == ["reports"]

    def test_search_requires_query(self, client):
        resp = client.get(f"{API}/search")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Search query is required"}


class TestMutations:
    def test_delete(self, client, root):
        write_tree(root, {"a.txt": b"a"})

        resp = client.request("DELETE", f"{API}/delete", json={"path": "a.txt"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Deleted successfully", "path": "a.txt"}

    def test_delete_missing_is_404(self, client):
        resp = client.request("DELETE", f"{API}/delete", json={"path": "ghost.txt"})
        assert resp.status_code == 404

    def test_move(self, client, root):
        write_tree(root, {"a.txt": b"a", "dest": None})

        resp = client.post(f"{API}/move", json={"sourcePath": "a.txt", "destinationPath": "dest/a.txt"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Moved successfully", "from": "a.txt", "to": "dest/a.txt"}
        assert (root / "dest" / "a.txt").exists()

    def test_move_conflict_is_400(self, client, root):
        write_tree(root, {"a.txt": b"a", "b.txt": b"b"})

        resp = client.post(f"{API}/move", json={"sourcePath": "a.txt", "destinationPath": "b.txt"})

        assert resp.status_code == 400

    def test_copy_collision(self, client, root):
        write_tree(root, {"x.txt": b"x"})

        resp = client.post(f"{API}/copy", json={"sourcePath": "x.txt", "destinationPath": "x.txt"})

        assert resp.status_code == 200
        assert resp.json()["to"] == "x-Copy.txt"

    def test_copy_overwrite(self, client, root):
        write_tree(root, {"x.txt": b"new", "y.txt": b"old"})

        resp = client.post(
            f"{API}/copy", json={"sourcePath": "x.txt", "destinationPath": "y.txt", "overwrite": True}
        )

        assert resp.json()["to"] == "y.txt"
        assert (root / "y.txt").read_bytes() == b"new"

    def test_create_folder(self, client, root):
        resp = client.post(f"{API}/createfolder", json={"parentPath": "", "folderName": "New"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Folder created successfully", "path": "New"}
        assert (root / "New").is_dir()

    def test_create_existing_folder_is_400(self, client, root):
        write_tree(root, {"New": None})

        resp = client.post(f"{API}/createfolder", json={"parentPath": "", "folderName": "New"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Folder already exists"}

    def test_malformed_body_is_400(self, client):
        resp = client.post(f"{API}/move", json={"sourcePath": "a.txt"})

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Invalid request")


class TestUpload:
    def test_upload(self, client, root):
        write_tree(root, {"inbox": None})

        resp = client.post(
            f"{API}/upload",
            data={"path": "inbox"},
            files=[("files", ("a.txt", b"alpha", "text/plain")), ("files", ("b.txt", b"beta", "text/plain"))],
        )

        assert resp.status_code == 200
        assert resp.json() == {"message": "Upload successful", "files": ["inbox/a.txt", "inbox/b.txt"]}
        assert (root / "inbox" / "b.txt").read_bytes() == b"beta"

    def test_upload_bracket_field_name(self, client, root):
        resp = client.post(f"{API}/upload", data={"path": ""}, files=[("files[]", ("c.txt", b"c", "text/plain"))])

        assert resp.status_code == 200
        assert (root / "c.txt").read_bytes() == b"c"

    def test_upload_into_missing_directory(self, client, root):
        resp = client.post(
            f"{API}/upload", data={"path": "missing"}, files=[("files", ("a.txt", b"a", "text/plain"))]
        )

        assert resp.status_code == 404
        assert list(root.iterdir()) == []

    def test_upload_without_files(self, client):
        resp = client.post(f"{API}/upload", data={"path": ""})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No files uploaded"}


class TestDownload:
    def test_download(self, client, root):
        write_tree(root, {"docs/a.txt": b"hello"})

        resp = client.get(f"{API}/download", params={"path": "docs/a.txt"})

        assert resp.status_code == 200
        assert resp.content == b"hello"
        assert resp.headers["content-disposition"] == 'attachment; filename="a.txt"'
        assert resp.headers["content-type"] == "application/octet-stream"
        assert resp.headers["content-length"] == "5"

    def test_download_unicode_name(self, client, root):
        write_tree(root, {"résumé.txt": b"cv"})

        resp = client.get(f"{API}/download", params={"path": "résumé.txt"})

        assert resp.headers["content-disposition"] == "attachment; filename*=UTF-8''r%C3%A9sum%C3%A9.txt"

    def test_download_missing(self, client):
        resp = client.get(f"{API}/download", params={"path": "ghost.txt"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "File not found"}

    def test_download_batch(self, client, root, scratch_dir):
        write_tree(root, {"fileA.txt": b"A", "dirB/x.txt": b"x"})

        resp = client.post(f"{API}/download-batch", json={"paths": ["fileA.txt", "dirB", "../nope"]})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/zip"
        assert re.fullmatch(
            r'attachment; filename="Download_\d{8}_\d{6}\.zip"', resp.headers["content-disposition"]
        )
        with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
            assert set(zf.namelist()) == {"fileA.txt", "dirB/", "dirB/x.txt"}
        assert list(scratch_dir.iterdir()) == []

    def test_download_batch_empty_selection(self, client):
        resp = client.post(f"{API}/download-batch", json={"paths": []})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No files selected"}


class TestWebUI:
    def test_root_redirects_to_ui(self, client):
        resp = client.get("/", follow_redirects=False)

        assert resp.status_code in (302, 307)
        assert resp.headers["location"] == "/ui/"

    def test_ui_is_served(self, client):
        resp = client.get("/ui/")

        assert resp.status_code == 200
        assert "RootShare" in resp.text

"""Shared fixtures: an in-memory GitHub contents API."""

import base64
import hashlib
import json

import httpx
import pytest

from cdnhub import Box

OWNER = "octo"
REPO = "store"
RAW_HOST = "raw.githubusercontent.com"


def blob_sha(data: bytes) -> str:
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class FakeGitHub:
    """Minimal GitHub contents API backed by a dict of path -> bytes."""

    def __init__(self, branch: str = "main", inline_limit: int = 1024 * 1024):
        self.branch = branch
        self.inline_limit = inline_limit
        self.files: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.commits: list[str] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.serve_downloads = True

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def seed(self, files: dict[str, bytes]) -> None:
        self.files.update(files)

    def bodies(self, method: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == method]

    # ---- request routing ----

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == RAW_HOST:
            path = request.url.path.split(f"/{self.branch}/", 1)[1]
            return httpx.Response(200, content=self.files[path])

        prefix = f"/repos/{OWNER}/{REPO}/contents"
        if not request.url.path.startswith(prefix):
            return self.error(404, "Not Found")
        path = request.url.path[len(prefix):].strip("/")

        status = self.failures.get((request.method, path))
        if status:
            return self.error(status, "Injected failure")

        if request.method == "GET":
            if request.url.params.get("ref", self.branch) != self.branch:
                return self.error(404, "No commit found for the ref")
            return self.get(path)
        body = json.loads(request.content)
        if body.get("branch", self.branch) != self.branch:
            return self.error(404, "Branch not found")
        if request.method == "PUT":
            return self.put(path, body)
        if request.method == "DELETE":
            return self.delete(path, body)
        return self.error(405, "Method not allowed")

    def get(self, path: str) -> httpx.Response:
        if path in self.files:
            return httpx.Response(200, json=self.record(path, inline=True))
        children = self.children(path)
        if children is None:
            return self.error(404, "Not Found")
        return httpx.Response(200, json=children)

    def put(self, path: str, body: dict) -> httpx.Response:
        if self.children(path):
            return self.error(422, "path is a directory")
        existing = self.files.get(path)
        if existing is not None:
            if "sha" not in body:
                return self.error(422, "Invalid request.\n\n\"sha\" wasn't supplied.")
            if body["sha"] != blob_sha(existing):
                return self.error(409, f"{path} does not match {body['sha']}")
        self.files[path] = base64.b64decode(body["content"])
        return httpx.Response(
            200 if existing is not None else 201,
            json={"content": self.record(path), "commit": self.commit(body["message"])},
        )

    def delete(self, path: str, body: dict) -> httpx.Response:
        if path not in self.files:
            return self.error(404, "Not Found")
        if body.get("sha") != blob_sha(self.files[path]):
            return self.error(409, f"{path} does not match {body.get('sha')}")
        del self.files[path]
        return httpx.Response(200, json={"content": None, "commit": self.commit(body["message"])})

    # ---- payloads ----

    def error(self, status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"message": message})

    def commit(self, message: str) -> dict:
        self.commits.append(message)
        return {"sha": f"{len(self.commits):040x}", "message": message}

    def record(self, path: str, inline: bool = False) -> dict:
        data = self.files[path]
        item = {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": blob_sha(data),
            "size": len(data),
            "url": f"https://api.github.com/repos/{OWNER}/{REPO}/contents/{path}",
            "html_url": f"https://github.com/{OWNER}/{REPO}/blob/{self.branch}/{path}",
            "git_url": None,
            "download_url": (
                f"https://{RAW_HOST}/{OWNER}/{REPO}/{self.branch}/{path}" if self.serve_downloads else None
            ),
            "type": "file",
        }
        if inline:
            if len(data) > self.inline_limit:
                item.update(content="", encoding="none")
            else:
                item.update(content=base64.encodebytes(data).decode("ascii"), encoding="base64")
        return item

    def children(self, path: str) -> list[dict] | None:
        """Immediate entries under a directory, None when it does not exist."""
        prefix = f"{path}/" if path else ""
        entries: dict[str, dict] = {}
        for file_path in self.files:
            if not file_path.startswith(prefix):
                continue
            head, sep, _ = file_path[len(prefix):].partition("/")
            if sep:
                entries[head] = {
                    "name": head,
                    "path": prefix + head,
                    "sha": blob_sha(head.encode()),
                    "size": 0,
                    "download_url": None,
                    "type": "dir",
                }
            else:
                entries[head] = self.record(file_path)
        if not entries and path:
            return None
        return [entries[name] for name in sorted(entries)]


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def box(github: FakeGitHub) -> Box:
    return Box(f"{OWNER}/{REPO}", token="test-token", transport=github.transport())

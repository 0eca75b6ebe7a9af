import base64
import hashlib
import json

import httpx
import pytest

from clients.github import ContentsClient
from session.registry import RepositoryRegistry
from session.session import Session
from storage.credential_store import CredentialStore
from storage.kv_store import MemoryStore


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool, resource and prompt registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.resources = {}
        self.prompts = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def resource(self, uri: str, **_kwargs):
        def _decorator(fn):
            self.resources[uri] = fn
            return fn
        return _decorator

    def prompt(self, *, name: str, **_kwargs):
        def _decorator(fn):
            self.prompts[name] = fn
            return fn
        return _decorator


def blob_sha(data: bytes) -> str:
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class FakeGitHub:
    """In-memory Contents API for one repository.

    Enforces the sha rules GitHub applies: updating or deleting an existing
    file needs its current sha, anything else is rejected with 409/422.
    """

    def __init__(self, owner: str = "acme", repo: str = "site", token: str = "ghp_test") -> None:
        self.owner = owner
        self.repo = repo
        self.token = token
        self.files = {}  # path -> bytes
        self.requests = []
        self.failures = {}  # (METHOD, path) -> (status, message)

    # --- test helpers ---

    def add_file(self, path: str, data) -> str:
        raw = data.encode("utf-8") if isinstance(data, str) else data
        self.files[path] = raw
        return blob_sha(raw)

    def sha_of(self, path: str) -> str:
        return blob_sha(self.files[path])

    def text_of(self, path: str) -> str:
        return self.files[path].decode("utf-8")

    def fail(self, method: str, path: str, status: int, message: str = "boom") -> None:
        self.failures[(method.upper(), path)] = (status, message)

    def calls(self, method: str = None):
        return [
            (r.method, self._repo_path(r))
            for r in self.requests
            if method is None or r.method == method.upper()
        ]

    # --- transport ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("Authorization") != f"token {self.token}":
            return httpx.Response(401, json={"message": "Bad credentials"})

        prefix = f"/repos/{self.owner}/{self.repo}/contents"
        if not request.url.path.startswith(prefix):
            return httpx.Response(404, json={"message": "Not Found"})

        path = self._repo_path(request)
        failure = self.failures.get((request.method, path))
        if failure is not None:
            status, message = failure
            return httpx.Response(status, json={"message": message})

        if request.method == "GET":
            return self._get(path)
        if request.method == "PUT":
            return self._put(path, json.loads(request.content))
        if request.method == "DELETE":
            return self._delete(path, json.loads(request.content))
        return httpx.Response(405, json={"message": "Method Not Allowed"})

    def _repo_path(self, request: httpx.Request) -> str:
        prefix = f"/repos/{self.owner}/{self.repo}/contents"
        return request.url.path[len(prefix):].strip("/")

    def _file_obj(self, path: str, *, with_content: bool) -> dict:
        data = self.files[path]
        obj = {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": blob_sha(data),
            "size": len(data),
            "type": "file",
        }
        if with_content:
            encoded = base64.b64encode(data).decode("ascii")
            # GitHub wraps content at 60 columns
            obj["content"] = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
            obj["encoding"] = "base64"
        return obj

    def _get(self, path: str) -> httpx.Response:
        if path in self.files:
            return httpx.Response(200, json=self._file_obj(path, with_content=True))

        prefix = f"{path}/" if path else ""
        entries = {}
        for file_path in sorted(self.files):
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            head = rest.split("/", 1)[0]
            child = f"{prefix}{head}"
            if "/" in rest:
                entries.setdefault(head, {"name": head, "path": child, "sha": f"tree-{child}", "size": 0, "type": "dir"})
            else:
                entries[head] = self._file_obj(child, with_content=False)

        if not entries and path:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=[entries[k] for k in sorted(entries)])

    def _put(self, path: str, body: dict) -> httpx.Response:
        sha = body.get("sha")
        if path in self.files:
            if not sha:
                return httpx.Response(422, json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'})
            if sha != self.sha_of(path):
                return httpx.Response(409, json={"message": f"{path} does not match {sha}"})
        try:
            data = base64.b64decode(body["content"], validate=True)
        except Exception:
            return httpx.Response(422, json={"message": "content is not valid Base64"})

        created = path not in self.files
        self.files[path] = data
        return httpx.Response(
            201 if created else 200,
            json={"content": self._file_obj(path, with_content=False), "commit": {"message": body.get("message")}},
        )

    def _delete(self, path: str, body: dict) -> httpx.Response:
        if path not in self.files:
            return httpx.Response(404, json={"message": "Not Found"})
        if body.get("sha") != self.sha_of(path):
            return httpx.Response(409, json={"message": f"{path} does not match {body.get('sha')}"})
        del self.files[path]
        return httpx.Response(200, json={"content": None, "commit": {"message": body.get("message")}})


class FixedClock:
    """Deterministic ISO timestamps for registry tests."""

    def __init__(self) -> None:
        self.ticks = 0

    def __call__(self) -> str:
        self.ticks += 1
        return f"2024-01-01T00:00:{self.ticks:02d}.000Z"


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_registry(clock):
    def _make(store=None):
        return RepositoryRegistry(CredentialStore(store or MemoryStore()), clock=clock)
    return _make


@pytest.fixture
def make_session(fake_github, make_registry):
    def _make(store=None):
        transport = httpx.MockTransport(fake_github.handler)

        def client_factory(registration):
            return ContentsClient(registration, transport=transport)

        return Session(make_registry(store), client_factory=client_factory)
    return _make


@pytest.fixture
def open_repo(make_session, fake_github):
    """Async factory: a session with acme/site registered, selected and opened at `path`."""

    async def _open(path: str = ""):
        session = make_session()
        result = session.add_repository(fake_github.token, fake_github.owner, fake_github.repo)
        await session.select_repository(result.registration.id)
        if path:
            await session.navigate_to(path)
        return session

    return _open

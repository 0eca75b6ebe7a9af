import base64
import json

import httpx
import pytest

from clients.github import ContentsClient
from core.errors import DecodeError, NotFoundError, RemoteError, UnauthorizedError, ValidationError
from core.models import EntryType, RepositoryRegistration


REPO = RepositoryRegistration(id="1", token="ghp_test", owner="acme", repo="site", added_at="2024-01-01T00:00:00Z")


# ---------------------------
# Helpers
# ---------------------------

def patch_github_transport(monkeypatch, client: ContentsClient, routes: dict, seen: list = None):
    """
    Patch ContentsClient._create_client() to use httpx.MockTransport.

    routes keys:
        (METHOD, PATH) -> httpx.Response  OR  (status_code, json)
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        key = (request.method.upper(), request.url.path)

        if key not in routes:
            return httpx.Response(404, json={"message": "Not Found"})

        val = routes[key]
        if isinstance(val, httpx.Response):
            return val

        status_code, js = val
        return httpx.Response(status_code, json=js)

    transport = httpx.MockTransport(handler)

    def _create_client():
        return httpx.AsyncClient(
            base_url=client._base_url,
            headers=client._headers,
            timeout=client._timeout,
            verify=client._verify,
            transport=transport,
        )

    monkeypatch.setattr(client, "_create_client", _create_client)


def _file(path: str, text: str, sha: str = "sha1") -> dict:
    return {
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "sha": sha,
        "size": len(text.encode("utf-8")),
        "type": "file",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        "encoding": "base64",
    }


# ---------------------------
# list_directory
# ---------------------------

@pytest.mark.asyncio
async def test_list_directory_keeps_array_order(monkeypatch):
    client = ContentsClient(REPO)
    routes = {
        ("GET", "/repos/acme/site/contents/"): (
            200,
            [
                {"name": "zeta.md", "path": "zeta.md", "sha": "s1", "size": 3, "type": "file"},
                {"name": "docs", "path": "docs", "sha": "s2", "size": 0, "type": "dir"},
                {"name": "alpha.txt", "path": "alpha.txt", "sha": "s3", "size": 10, "type": "file"},
            ],
        ),
    }
    patch_github_transport(monkeypatch, client, routes)

    out = await client.list_directory("")

    assert [e.name for e in out] == ["zeta.md", "docs", "alpha.txt"]
    assert out[1].type is EntryType.DIRECTORY
    assert out[1].size is None
    assert out[2].size == 10


@pytest.mark.asyncio
async def test_list_directory_normalizes_single_file_object(monkeypatch):
    client = ContentsClient(REPO)
    routes = {("GET", "/repos/acme/site/contents/README.md"): (200, _file("README.md", "hi", sha="abc"))}
    patch_github_transport(monkeypatch, client, routes)

    out = await client.list_directory("/README.md")

    assert len(out) == 1
    assert out[0].path == "README.md"
    assert out[0].sha == "abc"
    assert out[0].type is EntryType.FILE


@pytest.mark.asyncio
async def test_requests_carry_token_and_accept_headers(monkeypatch):
    client = ContentsClient(REPO)
    seen = []
    patch_github_transport(monkeypatch, client, {("GET", "/repos/acme/site/contents/"): (200, [])}, seen)

    await client.list_directory()

    assert seen[0].headers["Authorization"] == "token ghp_test"
    assert seen[0].headers["Accept"] == "application/vnd.github.v3+json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,exc",
    [(401, UnauthorizedError), (404, NotFoundError), (403, RemoteError), (500, RemoteError)],
)
async def test_list_directory_maps_status_codes(monkeypatch, status, exc):
    client = ContentsClient(REPO)
    routes = {("GET", "/repos/acme/site/contents/docs"): (status, {"message": "nope"})}
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(exc):
        await client.list_directory("docs")


@pytest.mark.asyncio
async def test_remote_error_carries_status_and_message(monkeypatch):
    client = ContentsClient(REPO)
    routes = {("GET", "/repos/acme/site/contents/docs"): (500, {"message": "Server Error"})}
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(RemoteError) as ei:
        await client.list_directory("docs")

    assert ei.value.status == 500
    assert str(ei.value) == "Server Error"


@pytest.mark.asyncio
async def test_transport_failure_becomes_remote_error(monkeypatch):
    client = ContentsClient(REPO)

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    def _create_client():
        return httpx.AsyncClient(base_url=client._base_url, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(client, "_create_client", _create_client)

    with pytest.raises(RemoteError) as ei:
        await client.list_directory("")
    assert ei.value.status is None


# ---------------------------
# read_file
# ---------------------------

@pytest.mark.asyncio
async def test_read_file_decodes_utf8(monkeypatch):
    client = ContentsClient(REPO)
    routes = {("GET", "/repos/acme/site/contents/docs/a.md"): (200, _file("docs/a.md", "grüße ✓", sha="s9"))}
    patch_github_transport(monkeypatch, client, routes)

    out = await client.read_file("docs/a.md")

    assert out.content == "grüße ✓"
    assert out.sha == "s9"


@pytest.mark.asyncio
async def test_read_file_bad_payload_raises_decode_error(monkeypatch):
    client = ContentsClient(REPO)
    obj = _file("a.bin", "x")
    obj["content"] = base64.b64encode(b"\xff\xfe").decode("ascii")
    patch_github_transport(monkeypatch, client, {("GET", "/repos/acme/site/contents/a.bin"): (200, obj)})

    with pytest.raises(DecodeError):
        await client.read_file("a.bin")


@pytest.mark.asyncio
async def test_read_file_on_directory_is_rejected(monkeypatch):
    client = ContentsClient(REPO)
    patch_github_transport(monkeypatch, client, {("GET", "/repos/acme/site/contents/docs"): (200, [])})

    with pytest.raises(ValidationError):
        await client.read_file("docs")


@pytest.mark.asyncio
async def test_read_file_empty_path_raises_before_request():
    client = ContentsClient(REPO)
    with pytest.raises(ValidationError):
        await client.read_file("  ")


# ---------------------------
# write / upload / delete
# ---------------------------

@pytest.mark.asyncio
async def test_write_file_sends_base64_body_without_sha(monkeypatch):
    client = ContentsClient(REPO)
    seen = []
    routes = {("PUT", "/repos/acme/site/contents/new.txt"): (201, {"content": {"sha": "newsha"}})}
    patch_github_transport(monkeypatch, client, routes, seen)

    sha = await client.write_file("new.txt", "héllo", "Create new.txt")

    assert sha == "newsha"
    body = json.loads(seen[0].content)
    assert body == {"message": "Create new.txt", "content": base64.b64encode("héllo".encode()).decode()}


@pytest.mark.asyncio
async def test_write_file_passes_existing_sha(monkeypatch):
    client = ContentsClient(REPO)
    seen = []
    routes = {("PUT", "/repos/acme/site/contents/a.txt"): (200, {"content": {"sha": "s2"}})}
    patch_github_transport(monkeypatch, client, routes, seen)

    await client.write_file("a.txt", "x", "Update a.txt", existing_sha="s1")

    assert json.loads(seen[0].content)["sha"] == "s1"


@pytest.mark.asyncio
async def test_write_with_stale_sha_is_rejected_without_side_effect(fake_github):
    original_sha = fake_github.add_file("a.txt", "v1")
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    # someone else updates the file
    await client.write_file("a.txt", "v2", "other session", existing_sha=original_sha)

    with pytest.raises(RemoteError) as ei:
        await client.write_file("a.txt", "v3", "stale", existing_sha=original_sha)

    assert ei.value.status == 409
    assert fake_github.text_of("a.txt") == "v2"
    assert list(fake_github.files) == ["a.txt"]


@pytest.mark.asyncio
async def test_create_over_existing_file_without_sha_is_rejected(fake_github):
    fake_github.add_file("a.txt", "v1")
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    with pytest.raises(RemoteError) as ei:
        await client.write_file("a.txt", "v2", "create")

    assert ei.value.status == 422
    assert fake_github.text_of("a.txt") == "v1"


@pytest.mark.asyncio
async def test_upload_binary_looks_up_existing_sha(fake_github):
    sha = fake_github.add_file("img.png", b"\x89PNG old")
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    await client.upload_binary("img.png", base64.b64encode(b"\x89PNG new").decode(), "Upload")

    assert fake_github.files["img.png"] == b"\x89PNG new"
    put = [r for r in fake_github.requests if r.method == "PUT"][0]
    assert json.loads(put.content)["sha"] == sha


@pytest.mark.asyncio
async def test_upload_binary_new_file_has_no_sha(fake_github):
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    await client.upload_binary("new.bin", base64.b64encode(b"\x00\x01").decode(), "Upload")

    put = [r for r in fake_github.requests if r.method == "PUT"][0]
    assert "sha" not in json.loads(put.content)
    assert fake_github.files["new.bin"] == b"\x00\x01"


@pytest.mark.asyncio
async def test_find_sha_returns_none_for_missing(fake_github):
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))
    assert await client.find_sha("missing.txt") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, encoded",
    [
        ("notes#1.md", b"/contents/notes%231.md"),
        ("a?b.txt", b"/contents/a%3Fb.txt"),
        ("my docs/100% done.md", b"/contents/my%20docs/100%25%20done.md"),
    ],
)
async def test_paths_are_percent_encoded(fake_github, path, encoded):
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    await client.write_file(path, "x", "Create")

    put = [r for r in fake_github.requests if r.method == "PUT"][0]
    assert put.url.raw_path.endswith(encoded)
    assert fake_github.text_of(path) == "x"
    assert (await client.read_file(path)).content == "x"


@pytest.mark.asyncio
async def test_delete_entry_sends_message_and_sha(fake_github):
    sha = fake_github.add_file("a.txt", "x")
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    await client.delete_entry("a.txt", sha, "Delete a.txt")

    assert "a.txt" not in fake_github.files
    delete = fake_github.requests[-1]
    assert json.loads(delete.content) == {"message": "Delete a.txt", "sha": sha}


@pytest.mark.asyncio
async def test_delete_entry_stale_sha_surfaces_remote_message(fake_github):
    fake_github.add_file("a.txt", "x")
    client = ContentsClient(REPO, transport=httpx.MockTransport(fake_github.handler))

    with pytest.raises(RemoteError, match="does not match"):
        await client.delete_entry("a.txt", "stale", "Delete a.txt")
    assert "a.txt" in fake_github.files


@pytest.mark.asyncio
async def test_bad_token_is_unauthorized(fake_github):
    bad = RepositoryRegistration(id="2", token="ghp_wrong", owner="acme", repo="site", added_at="x")
    client = ContentsClient(bad, transport=httpx.MockTransport(fake_github.handler))

    with pytest.raises(UnauthorizedError):
        await client.list_directory("")

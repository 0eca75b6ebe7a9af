import pytest

from sources.local_source import LocalSource
from core.errors import AccessDeniedError, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_local_read_bytes_success(tmp_path):
    (tmp_path / "a.bin").write_bytes(b"\x00\x01")

    src = LocalSource(project_root=tmp_path)
    assert await src.read_bytes("a.bin") == b"\x00\x01"


@pytest.mark.asyncio
async def test_local_read_bytes_not_found(tmp_path):
    src = LocalSource(project_root=tmp_path)
    with pytest.raises(NotFoundError):
        await src.read_bytes("missing.txt")


@pytest.mark.asyncio
async def test_local_read_bytes_directory_rejected(tmp_path):
    (tmp_path / "sub").mkdir()

    src = LocalSource(project_root=tmp_path)
    with pytest.raises(ValidationError):
        await src.read_bytes("sub")


@pytest.mark.asyncio
async def test_local_read_blocks_path_traversal(tmp_path):
    src = LocalSource(project_root=tmp_path)
    with pytest.raises(AccessDeniedError):
        await src.read_bytes("../secrets.txt")


def test_local_resolve_empty_path(tmp_path):
    src = LocalSource(project_root=tmp_path)
    with pytest.raises(ValidationError):
        src.resolve("  ")


@pytest.mark.asyncio
async def test_local_write_bytes_creates_parents(tmp_path):
    src = LocalSource(project_root=tmp_path)

    out = await src.write_bytes("exports/backup.json", b"[]")

    assert out == tmp_path.resolve() / "exports" / "backup.json"
    assert out.read_bytes() == b"[]"


@pytest.mark.asyncio
async def test_local_write_bytes_outside_root(tmp_path):
    src = LocalSource(project_root=tmp_path / "root")
    with pytest.raises(AccessDeniedError):
        await src.write_bytes("../escape.txt", b"x")
    assert not (tmp_path / "escape.txt").exists()


@pytest.mark.asyncio
async def test_local_write_bytes_onto_directory(tmp_path):
    (tmp_path / "sub").mkdir()
    src = LocalSource(project_root=tmp_path)
    with pytest.raises(ValidationError):
        await src.write_bytes("sub", b"x")


@pytest.mark.asyncio
async def test_local_load_upload_files_uses_base_names(tmp_path):
    (tmp_path / "img").mkdir()
    (tmp_path / "img" / "logo.png").write_bytes(b"png")
    (tmp_path / "notes.txt").write_bytes(b"txt")

    src = LocalSource(project_root=tmp_path)
    files = await src.load_upload_files(["img/logo.png", "notes.txt"])

    assert [(f.name, f.size) for f in files] == [("logo.png", 3), ("notes.txt", 3)]
    assert [await f.read() for f in files] == [b"png", b"txt"]


@pytest.mark.asyncio
async def test_local_load_upload_files_defers_missing_file_error(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"a")

    src = LocalSource(project_root=tmp_path)
    files = await src.load_upload_files(["a.txt", "missing.txt"])

    assert [(f.name, f.size) for f in files] == [("a.txt", 1), ("missing.txt", 0)]
    with pytest.raises(NotFoundError, match="File not found: missing.txt"):
        await files[1].read()

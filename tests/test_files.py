"""
Tests for the file and file tree services.
"""

import os
from pathlib import Path

import pytest

from arbor.decorators import Error
from arbor.responses import ok
from arbor.services.files import File, FileTree, etag
from arbor.utils.files import FS, FileStat, contentType


def test_etag(tree: Path):
	path = tree / "numbers.txt"
	st = os.stat(path)
	stat = FS.stat(path)
	assert stat == FileStat(True, False, 4, st.st_ino, st.st_mtime_ns // 1_000_000)
	assert etag(stat) == f"{st.st_ino}-4-{st.st_mtime_ns // 1_000_000}"


def test_file(client, tree: Path):
	res, body = client(File(tree / "numbers.txt"))
	assert res.status == 200
	assert body == b"1234"
	assert res.headers["content-type"] == "text/plain"
	assert res.headers["content-length"] == "4"
	assert res.headers["etag"] == etag(FS.stat(tree / "numbers.txt"))


def test_file_content_type_override(client, tree: Path):
	res, _ = client(File(tree / "numbers.txt", "application/x-numbers"))
	assert res.headers["content-type"] == "application/x-numbers"


def test_file_not_modified(client, tree: Path):
	tag = etag(FS.stat(tree / "numbers.txt"))
	res, body = client(File(tree / "numbers.txt"), headers={"If-None-Match": tag})
	assert res.status == 304
	assert body == b""
	assert "content-length" not in res.headers
	res, body = client(File(tree / "numbers.txt"), headers={"If-None-Match": "stale"})
	assert res.status == 200
	assert body == b"1234"


def test_file_range(client, tree: Path):
	res, body = client(File(tree / "numbers.txt"), headers={"Range": "bytes=1-2"})
	assert res.status == 206
	assert body == b"23"
	assert res.headers["content-range"] == "bytes 1-2/4"
	assert res.headers["content-length"] == "2"
	assert "etag" in res.headers


def test_file_range_suffix(client, tree: Path):
	res, body = client(File(tree / "numbers.txt"), headers={"Range": "bytes=-2"})
	assert (res.status, body) == (206, b"34")
	# Suffixes longer than the file select all of it
	res, body = client(File(tree / "numbers.txt"), headers={"Range": "bytes=-10"})
	assert (res.status, body) == (206, b"1234")
	assert res.headers["content-range"] == "bytes 0-3/4"


@pytest.mark.parametrize("range", ["bytes=2-9", "bytes=4-", "bytes=-0"])
def test_file_range_not_satisfiable(client, tree: Path, range: str):
	res, _ = client(File(tree / "numbers.txt"), headers={"Range": range})
	assert res.status == 416
	assert res.headers["content-range"] == "bytes */4"


def test_file_range_invalid_is_ignored(client, tree: Path):
	res, body = client(File(tree / "numbers.txt"), headers={"Range": "items=1-2"})
	assert (res.status, body) == (200, b"1234")


def test_file_if_range(client, tree: Path):
	tag = etag(FS.stat(tree / "numbers.txt"))
	res, body = client(
		File(tree / "numbers.txt"), headers={"Range": "bytes=0-1", "If-Range": tag}
	)
	assert (res.status, body) == (206, b"12")
	res, body = client(
		File(tree / "numbers.txt"), headers={"Range": "bytes=0-1", "If-Range": "old"}
	)
	assert (res.status, body) == (200, b"1234")


def test_file_missing(client, tree: Path):
	with pytest.raises(OSError):
		client(File(tree / "missing.txt"))


# -----------------------------------------------------------------------------
#
# FILE TREE
#
# -----------------------------------------------------------------------------


def test_file_tree(client, tree: Path):
	app = FileTree(tree)
	res, body = client(app, "/numbers.txt")
	assert (res.status, body) == (200, b"1234")
	res, body = client(app, "/docs/index.html")
	assert (res.status, body) == (200, b"<h1>Docs</h1>")
	assert res.headers["content-type"] == "text/html"
	res, body = client(app, "/hello%20world.txt")
	assert (res.status, body) == (200, b"Hello")


def test_file_tree_uses_path_info(client, tree: Path):
	res, body = client(
		FileTree(tree), "/static/numbers.txt", scriptName="/static/", pathInfo="/numbers.txt"
	)
	assert (res.status, body) == (200, b"1234")


def test_file_tree_content_type(client, tree: Path):
	res, _ = client(FileTree(tree, contentType="text/x-custom"), "/numbers.txt")
	assert res.headers["content-type"] == "text/x-custom"


def test_file_tree_not_found(client, tree: Path):
	res, body = client(FileTree(tree), "/missing.txt")
	assert res.status == 404
	assert body == b"Not Found: GET /missing.txt\r\n"
	res, _ = client(FileTree(tree / "missing"), "/numbers.txt")
	assert res.status == 404


@pytest.mark.parametrize("path", ["/../secret.txt", "/%2e%2e/secret.txt", "/docs/../../secret.txt"])
def test_file_tree_containment(client, tree: Path, path: str):
	res, body = client(FileTree(tree), path)
	assert res.status == 404
	assert b"secret" not in body


@pytest.mark.parametrize("path", ["/%00", "/docs/%00.html", "/numbers.txt%00"])
def test_file_tree_null_characters(client, tree: Path, path: str):
	res, _ = client(Error(FileTree(tree)), path)
	assert res.status == 404


def test_file_tree_escaping_link(client, tree: Path):
	(tree / "escape.txt").symlink_to(tree.parent / "secret.txt")
	for redirectSymbolicLinks in (True, False):
		res, _ = client(
			FileTree(tree, redirectSymbolicLinks=redirectSymbolicLinks), "/escape.txt"
		)
		assert res.status == 404


def test_file_tree_links(client, tree: Path, logs):
	(tree / "link.txt").symlink_to("numbers.txt")
	res, body = client(FileTree(tree), "/link.txt")
	assert (res.status, body) == (200, b"1234")
	res, _ = client(FileTree(tree, redirectSymbolicLinks=True), "/link.txt")
	assert res.status == 307
	assert res.headers["location"] == "http://localhost/numbers.txt"
	assert "Redirecting symbolic link" in logs.getvalue()


def test_file_tree_directory_links(client, tree: Path):
	(tree / "alias").symlink_to("docs", target_is_directory=True)
	app = FileTree(tree, redirectSymbolicLinks=True)
	res, _ = client(app, "/alias/index.html")
	assert res.headers["location"] == "http://localhost/docs/index.html"
	res, _ = client(app, "/alias/")
	assert res.headers["location"] == "http://localhost/docs/"


def test_file_tree_permanent_links(client, tree: Path):
	(tree / "link.txt").symlink_to("numbers.txt")
	res, _ = client(
		FileTree(tree, redirectSymbolicLinks=True, permanent=True), "/link.txt"
	)
	assert res.status == 301
	res, _ = client(FileTree(tree, redirectSymbolicLinks=True), "/link.txt", permanent=True)
	assert res.status == 301


def test_file_tree_custom_redirect(client, tree: Path):
	(tree / "link.txt").symlink_to("numbers.txt")
	locations: list[str] = []

	def redirect(request, location: str):
		locations.append(location)
		return ok("moved", status=200)

	res, body = client(
		FileTree(tree, redirectSymbolicLinks=True, redirect=redirect), "/link.txt"
	)
	assert body == b"moved"
	assert locations == ["numbers.txt"]


def test_file_tree_directory(client, tree: Path):
	with pytest.raises(NotImplementedError):
		client(FileTree(tree), "/docs")
	res, body = client(
		FileTree(tree, directory=lambda request, path, contentType: ok(path.name)),
		"/docs/",
	)
	assert body == b"docs"


def test_file_tree_custom_file(client, tree: Path):
	async def file(request, path: Path, contentType):
		return ok(f"file:{path.name}")

	_, body = client(FileTree(tree, file=file), "/numbers.txt")
	assert body == b"file:numbers.txt"


# -----------------------------------------------------------------------------
#
# FILE SYSTEM
#
# -----------------------------------------------------------------------------


def test_file_system(tree: Path):
	root = FS.canonical(tree)
	assert FS.join(root, "docs", "..", "numbers.txt") == root / "numbers.txt"
	assert FS.contains(root, root / "docs" / "index.html")
	assert FS.contains(root, root)
	assert not FS.contains(root / "docs", root)
	assert not FS.contains(root, root.parent / "rootless")
	assert FS.relative(root / "docs" / "a.txt", root / "numbers.txt") == "../numbers.txt"
	assert FS.extension(root / "numbers.txt") == ".txt"
	with pytest.raises(OSError):
		FS.canonical(root / "missing")
	with pytest.raises(OSError):
		FS.canonical(root / "a\x00b")
	with pytest.raises(OSError):
		FS.stat(root / "a\x00b")


def test_content_type():
	assert contentType("a.html") == "text/html"
	assert contentType("a.tar.gz") == "application/x-gzip"
	assert contentType("noextension") == "application/octet-stream"


# EOF

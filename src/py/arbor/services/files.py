from pathlib import Path
from typing import Any, Callable
from urllib.parse import unquote

from ..http.model import HTTPRequest, HTTPResponse
from ..http.ranges import ByteRange, RANGE_UNIT, interpretFirstRange
from ..model import App, TApp, awaited
from ..responses import notFound as notFoundApp
from ..responses import redirect as redirectResponse
from ..responses import responseForStatus
from ..utils.files import FS, FileStat, FileSystem
from ..utils.logging import debug, warning

__doc__ = """
Serving of files and file trees, with support for conditional and range
requests.
"""

# -----------------------------------------------------------------------------
#
# FILE
#
# -----------------------------------------------------------------------------


def etag(stat: FileStat) -> str:
	"""Returns the entity tag for the given file stat, which changes
	whenever the file is replaced, resized or modified."""
	return f"{stat.inode}-{stat.size}-{stat.mtime}"


async def file(
	request: HTTPRequest,
	path: Path,
	contentType: str | None = None,
	*,
	fs: FileSystem = FS,
) -> HTTPResponse:
	"""Responds with the file at the given path, honoring the `Range`,
	`If-Range` and `If-None-Match` request headers. Stat failures are
	raised as `OSError`."""
	contentType = contentType or fs.contentType(path)
	stat: FileStat = fs.stat(path)
	tag: str = etag(stat)
	headers: dict[str, str] = {"etag": tag}
	status: int = 200
	selection: ByteRange | None = None
	range: str | None = request.header("range")
	if range:
		# A mismatching `If-Range` means the client's copy is stale, so
		# we send the whole file instead.
		condition: str | None = request.header("if-range")
		if condition is None or condition == tag:
			selection = interpretFirstRange(range, stat.size)
		if selection:
			if selection.begin < 0:
				selection = ByteRange(0, selection.end)
			if selection.end > stat.size or selection.begin >= selection.end:
				return responseForStatus(416).setHeader(
					"content-range", f"{RANGE_UNIT} */{stat.size}"
				)
			status = 206
			headers["content-range"] = selection.contentRange(stat.size)
	elif request.header("if-none-match") == tag:
		return responseForStatus(304).setHeader("etag", tag)
	return HTTPResponse.Create(
		fs.open(path, selection),
		contentType=contentType,
		contentLength=selection.length if selection else stat.size,
		headers=headers,
		status=status,
	)


class File(App):
	"""An app that serves a single file."""

	def __init__(
		self, path: Path | str, contentType: str | None = None, *, fs: FileSystem = FS
	):
		self.path: Path = Path(path)
		self.contentType: str | None = contentType
		self.fs: FileSystem = fs

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		return await file(request, self.path, self.contentType, fs=self.fs)

	def __repr__(self) -> str:
		return f"(File {self.path})"


def directory(
	request: HTTPRequest, path: Path, contentType: str | None = None
) -> HTTPResponse:
	"""The default directory handler: listings are not supported."""
	raise NotImplementedError(f"Directory listing is not supported: {path}")


# -----------------------------------------------------------------------------
#
# FILE TREE
#
# -----------------------------------------------------------------------------


class FileTree(App):
	"""Serves the files under the given root, mapping the path left to
	route to a file path. Paths that resolve outside of the root, after
	following symbolic links, are not found. When `redirectSymbolicLinks`
	is set, paths going through symbolic links redirect to their
	canonical location."""

	def __init__(
		self,
		root: Path | str,
		*,
		notFound: TApp = notFoundApp,
		file: Callable[..., Any] | None = None,
		directory: Callable[..., Any] = directory,
		contentType: str | None = None,
		redirectSymbolicLinks: bool = False,
		redirect: Callable[[HTTPRequest, str], Any] | None = None,
		permanent: bool | None = None,
		fs: FileSystem = FS,
	):
		self.root: Path = Path(root)
		self.notFound: TApp = notFound
		self.file: Callable[..., Any] = file or self.serveFile
		self.directory: Callable[..., Any] = directory
		self.contentType: str | None = contentType
		self.redirectSymbolicLinks: bool = redirectSymbolicLinks
		self.redirect: Callable[[HTTPRequest, str], Any] = redirect or self.redirectTo
		self.permanent: bool | None = permanent
		self.fs: FileSystem = fs

	async def serveFile(
		self, request: HTTPRequest, path: Path, contentType: str | None = None
	) -> HTTPResponse:
		return await file(request, path, contentType, fs=self.fs)

	def redirectTo(self, request: HTTPRequest, location: str) -> HTTPResponse:
		return redirectResponse(
			request, location, permanent=True if self.permanent else None
		)

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		fs = self.fs
		try:
			root: Path = fs.canonical(self.root)
			path: Path = fs.join(
				root,
				*(unquote(_, errors="strict") for _ in request.pathInfo.split("/") if _),
			)
			canonical: Path = fs.canonical(path)
		except (OSError, UnicodeDecodeError):
			return await awaited(self.notFound(request))
		if not fs.contains(root, canonical):
			warning(
				"Path resolves outside of the file tree",
				Path=request.path,
				Root=str(root),
			)
			return await awaited(self.notFound(request))
		elif path != canonical and self.redirectSymbolicLinks:
			location: str = fs.relative(path, canonical)
			if request.pathInfo.endswith("/"):
				# The URL designates the directory itself, not an entry in it
				location = f"../{location}/"
			debug("Redirecting symbolic link", Path=request.path, Location=location)
			return await awaited(self.redirect(request, location))
		try:
			stat: FileStat = fs.stat(canonical)
		except OSError:
			return await awaited(self.notFound(request))
		if stat.isFile:
			return await awaited(self.file(request, canonical, self.contentType))
		elif stat.isDirectory:
			return await awaited(self.directory(request, canonical, self.contentType))
		else:
			return await awaited(self.notFound(request))

	def __repr__(self) -> str:
		return f"(FileTree {self.root})"


# EOF

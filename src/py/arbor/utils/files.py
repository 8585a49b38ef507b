import mimetypes
import os
import stat
from pathlib import Path
from typing import NamedTuple

from ..http.model import HTTPBodyFile
from ..http.ranges import ByteRange

mimetypes.init()

MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	mjs="application/javascript",
	md="text/markdown",
)


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path"""
	name = str(path)
	return (
		res
		if (res := MIME_TYPES.get(name.rsplit(".", 1)[-1].lower()))
		else mimetypes.guess_type(name)[0] or "application/octet-stream"
	)


class FileStat(NamedTuple):
	"""The subset of `os.stat` that the file services need, with the
	modification time in integer milliseconds."""

	isFile: bool
	isDirectory: bool
	size: int
	inode: int
	mtime: int


class FileSystem:
	"""The filesystem primitives used to serve files. Paths are always
	`Path` objects, and failures are raised as `OSError`. Tests and
	virtual trees can provide their own."""

	def stat(self, path: Path) -> FileStat:
		"""Stats the path, following symbolic links."""
		try:
			st = os.stat(path)
		except ValueError as e:
			# Paths with embedded null characters
			raise OSError(f"Invalid path: {path!r}") from e
		return FileStat(
			isFile=stat.S_ISREG(st.st_mode),
			isDirectory=stat.S_ISDIR(st.st_mode),
			size=st.st_size,
			inode=st.st_ino,
			mtime=st.st_mtime_ns // 1_000_000,
		)

	def open(self, path: Path, range: ByteRange | None = None) -> HTTPBodyFile:
		"""Returns a body that streams the file, or the given range of it."""
		return (
			HTTPBodyFile(path)
			if range is None
			else HTTPBodyFile(path, range.begin, range.end)
		)

	def canonical(self, path: Path) -> Path:
		"""Returns the absolute path with all the symbolic links resolved,
		raising `OSError` when it does not exist."""
		try:
			return Path(path).resolve(strict=True)
		except (RuntimeError, ValueError) as e:
			# Symbolic link loops on older Pythons, or embedded null characters
			raise OSError(f"Could not resolve path: {path!r}") from e

	def join(self, root: Path, *segments: str) -> Path:
		"""Joins the segments to the root, normalizing the result but not
		resolving symbolic links."""
		return Path(os.path.normpath(os.path.join(root, *segments)))

	def contains(self, parent: Path, path: Path) -> bool:
		return path == parent or path.is_relative_to(parent)

	def relative(self, source: Path, target: Path) -> str:
		"""Returns the relative location of `target` as seen from the
		directory containing `source`, usable as a relative URL."""
		return Path(os.path.relpath(target, source.parent)).as_posix()

	def extension(self, path: Path) -> str:
		return path.suffix

	def contentType(self, path: Path) -> str:
		return contentType(path)


# The default filesystem
FS: FileSystem = FileSystem()

# EOF

import asyncio
import inspect
from copy import copy
from http.cookies import CookieError, SimpleCookie
from pathlib import Path
from typing import (
	Any,
	AsyncGenerator,
	AsyncIterator,
	Generator,
	NamedTuple,
	TypeAlias,
)

from ..config import CHUNK_SIZE, DEFAULT_ENCODING
from ..utils.json import json
from .status import HTTP_STATUS, hasNoBody

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name, which are always lower-case in requests
	and responses."""
	if name in headers:
		return headers[name]
	normalized: str = name.lower()
	headers[name] = normalized
	return normalized


def asWritable(value: Any) -> bytes:
	if isinstance(value, bytes) or isinstance(value, bytearray):
		return bytes(value)
	elif isinstance(value, str):
		return value.encode(DEFAULT_ENCODING)
	else:
		return json(value)


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""To be raised by apps to generate an error response, a 500 unless
	`status` says otherwise. Converted by the `Error` decorator."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
		payload: Any = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType
		self.payload: Any = payload


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""A body held in memory."""

	payload: bytes = b""

	@property
	def length(self) -> int:
		return len(self.payload)


class HTTPBodyFile(NamedTuple):
	"""A body streamed from the file at `path`, limited to the `[start, end)`
	interval when `end` is given. It can be read only once."""

	path: Path
	start: int = 0
	end: int | None = None

	@property
	def length(self) -> int:
		return (self.path.stat().st_size if self.end is None else self.end) - self.start

	async def read(self, size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
		# Opening and reading run in worker threads, off the event loop
		with await asyncio.to_thread(open, self.path, "rb") as f:
			f.seek(self.start)
			remaining: int | None = None if self.end is None else self.end - self.start
			while remaining is None or remaining > 0:
				chunk: bytes = await asyncio.to_thread(
					f.read, size if remaining is None else min(size, remaining)
				)
				if not chunk:
					break
				if remaining is not None:
					remaining -= len(chunk)
				yield chunk


class HTTPBodyStream(NamedTuple):
	"""A body generated from a stream."""

	stream: Generator[str | bytes, Any, Any]


class HTTPBodyAsyncStream(NamedTuple):
	"""A body generated from an asynchronous stream."""

	stream: AsyncGenerator[str | bytes, Any]


# The different types of bodies that are managed
THTTPBody: TypeAlias = (
	HTTPBodyBlob | HTTPBodyFile | HTTPBodyStream | HTTPBodyAsyncStream
)


async def iterBody(body: THTTPBody | None) -> AsyncIterator[bytes]:
	"""Iterates on the byte chunks of any kind of body."""
	if body is None:
		return
	elif isinstance(body, HTTPBodyBlob):
		if body.payload:
			yield body.payload
	elif isinstance(body, HTTPBodyFile):
		async for chunk in body.read():
			yield chunk
	elif isinstance(body, HTTPBodyStream):
		try:
			for chunk in body.stream:
				yield asWritable(chunk)
		finally:
			body.stream.close()
	elif isinstance(body, HTTPBodyAsyncStream):
		try:
			async for chunk in body.stream:
				yield asWritable(chunk)
		finally:
			await body.stream.aclose()
	else:
		raise ValueError(f"Unsupported body format: {body}")


async def loadBody(body: THTTPBody | None) -> bytes:
	res = bytearray()
	async for chunk in iterBody(body):
		res += chunk
	return bytes(res)


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest:
	"""Represents an HTTP request as it is routed. Requests are not modified
	in place: routing steps create derived requests with `derive()` and
	`advance()`, so that a request given to an app stays valid for the
	next one.

	The `scriptName` is the part of the path that has been routed so far,
	ending with `/`, and `pathInfo` is the part left to route, starting
	with `/` or empty. The path is always `scriptName[:-1] + pathInfo`."""

	__slots__ = [
		"method",
		"path",
		"query",
		"protocol",
		"scheme",
		"headers",
		"body",
		"remoteHost",
		"remotePort",
		"port",
		"scriptName",
		"pathInfo",
		"terms",
		"permanent",
		"session",
	]

	@staticmethod
	def Create(
		method: str = "GET",
		path: str = "/",
		headers: dict[str, str] | None = None,
		body: bytes | str | THTTPBody | None = None,
		**attributes: Any,
	) -> "HTTPRequest":
		"""Creates a request, splitting the query string out of the path."""
		path, _, query = path.partition("?")
		return HTTPRequest(
			method=method,
			path=path or "/",
			query=query or None,
			headers=headers,
			body=(
				HTTPBodyBlob(asWritable(body))
				if isinstance(body, str) or isinstance(body, bytes)
				else body
			),
			**attributes,
		)

	def __init__(
		self,
		method: str,
		path: str,
		query: str | None = None,
		headers: dict[str, str] | None = None,
		body: THTTPBody | None = None,
		protocol: str = "HTTP/1.1",
		scheme: str = "http",
		remoteHost: str | None = None,
		remotePort: int | None = None,
		port: int | None = None,
		scriptName: str = "/",
		pathInfo: str | None = None,
		terms: dict[str, str] | None = None,
		permanent: bool = False,
		session: Any = None,
	):
		self.method: str = method
		self.path: str = path
		self.query: str | None = query
		self.protocol: str = protocol
		self.scheme: str = scheme
		self.headers: dict[str, str] = (
			{headername(k): v for k, v in headers.items()} if headers else {}
		)
		self.body: THTTPBody | None = body
		self.remoteHost: str | None = remoteHost
		self.remotePort: int | None = remotePort
		self.port: int | None = port
		self.scriptName: str = scriptName
		self.pathInfo: str = path if pathInfo is None else pathInfo
		self.terms: dict[str, str] = terms or {}
		self.permanent: bool = permanent
		self.session: Any = session

	def derive(self, **changes: Any) -> "HTTPRequest":
		"""Returns a copy of this request with the given attributes changed."""
		res = copy(self)
		for k, v in changes.items():
			if k not in HTTPRequest.__slots__:
				raise AttributeError(f"HTTPRequest has no attribute '{k}'")
			setattr(res, k, v)
		return res

	def advance(self, segment: str) -> "HTTPRequest":
		"""Returns a request where the given (raw) segment, which must be
		the next one in `pathInfo`, has been moved to `scriptName`."""
		prefix: str = f"/{segment}"
		if not (
			self.pathInfo == prefix or self.pathInfo.startswith(f"{prefix}/")
		):
			raise ValueError(
				f"Segment {repr(segment)} is not next in path info {repr(self.pathInfo)}"
			)
		return self.derive(
			scriptName=f"{self.scriptName}{segment}/",
			pathInfo=self.pathInfo[len(prefix) :],
		)

	@property
	def segment(self) -> str | None:
		"""The next raw segment of `pathInfo`, if `pathInfo` starts with `/`."""
		if not self.pathInfo.startswith("/"):
			return None
		return self.pathInfo[1:].split("/", 1)[0]

	@property
	def host(self) -> str | None:
		return self.headers.get("host")

	@property
	def url(self) -> str:
		"""The absolute URL of this request."""
		return f"{self.scheme}://{self.host or 'localhost'}{self.path}{f'?{self.query}' if self.query else ''}"

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def cookies(self) -> dict[str, str]:
		"""Returns the cookies sent with this request."""
		h = self.header("cookie")
		if not h:
			return {}
		cookies: SimpleCookie = SimpleCookie()
		try:
			cookies.load(h)
		except CookieError:
			return {}
		return {k: v.value for k, v in cookies.items()}

	def cookie(self, name: str) -> str | None:
		return self.cookies().get(name)

	async def load(self) -> bytes:
		"""Loads the whole request body."""
		return await loadBody(self.body)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.query}' if self.query else ''} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response, with lower-case header names."""

	__slots__ = ["status", "message", "headers", "body"]

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects. Content can be
		text, bytes, a list of these, a path, a (possibly async) generator
		or an already made body."""
		payload: bytes | None = None
		body: THTTPBody | None = None
		if content is None:
			pass
		elif isinstance(content, str) or isinstance(content, bytes):
			payload = asWritable(content)
		elif isinstance(content, list) or isinstance(content, tuple):
			payload = b"".join(asWritable(_) for _ in content)
		elif isinstance(content, Path):
			body = HTTPBodyFile(content.absolute())
			contentLength = body.length if contentLength is None else contentLength
		elif inspect.isgenerator(content):
			body = HTTPBodyStream(content)
		elif inspect.isasyncgen(content):
			body = HTTPBodyAsyncStream(content)
		elif isinstance(
			content, (HTTPBodyBlob, HTTPBodyFile, HTTPBodyStream, HTTPBodyAsyncStream)
		):
			body = content
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if payload is not None:
			contentLength = len(payload)
			body = HTTPBodyBlob(payload)
		res: dict[str, str] = (
			{headername(k): str(v) for k, v in headers.items()} if headers else {}
		)
		if contentType is not None:
			res["content-type"] = contentType
		if contentLength is not None:
			res["content-length"] = str(contentLength)
		# Some statuses must not have a body, so there's no content to describe
		if hasNoBody(status):
			body = None
			res.pop("content-type", None)
			res.pop("content-length", None)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=res,
			body=body,
		)

	def __init__(
		self,
		status: int,
		message: str | None = None,
		headers: dict[str, str] | None = None,
		body: THTTPBody | None = None,
	):
		self.status: int = status
		self.message: str | None = message
		self.headers: dict[str, str] = headers if headers is not None else {}
		self.body: THTTPBody | None = body

	def getHeader(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.pop(headername(name), None)
		else:
			self.headers[headername(name)] = str(value)
		return self

	def setHeaders(self, headers: dict[str, str | int | None]) -> "HTTPResponse":
		for k, v in headers.items():
			self.setHeader(k, v)
		return self

	async def load(self) -> bytes:
		"""Loads the whole body, which consumes it for streams and files."""
		return await loadBody(self.body)

	def __str__(self) -> str:
		return f"Response({self.status} {self.message} {self.headers} {self.body})"


# EOF

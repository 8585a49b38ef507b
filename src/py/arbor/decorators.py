import time
import traceback
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Callable, Iterable

from .config import DEBUG, LOG_REQUESTS
from .http.model import (
	HTTPBodyBlob,
	HTTPRequest,
	HTTPRequestError,
	HTTPResponse,
	headername,
)
from .http.status import hasNoBody
from .model import Decorator, TApp, awaited, respond
from .responses import json, responseForStatus
from .utils.logging import error, exception, info, warning

__doc__ = """
Decorators wrap an app to change the request it receives or the response
it returns. `Tap` and `Trap` are the general forms, the others are
specific uses.
"""

# About ten years, for responses that never expire
PERMANENT_DURATION: timedelta = timedelta(days=3652)


def httpdate(value: datetime) -> str:
	"""Formats the datetime as an HTTP date, like `Sun, 06 Nov 1994 08:49:37 GMT`."""
	return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def now() -> datetime:
	return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
#
# TAP & TRAP
#
# -----------------------------------------------------------------------------


class Tap(Decorator):
	"""Calls `tap(request)` before the app. When it returns a response, the
	app is skipped. When it returns a request, it is given to the app
	instead of the original one."""

	def __init__(self, app: TApp, tap: Callable[[HTTPRequest], Any]):
		super().__init__(app)
		self.tap: Callable[[HTTPRequest], Any] = tap

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		res: Any = await awaited(self.tap(request))
		if isinstance(res, HTTPResponse):
			return res
		elif isinstance(res, HTTPRequest):
			request = res
		return await respond(self.app, request)


class Trap(Decorator):
	"""Calls `trap(response, request)` with the app's response, replacing
	the response with the trap's result unless it is `None`."""

	def __init__(
		self, app: TApp, trap: Callable[[HTTPResponse, HTTPRequest], Any]
	):
		super().__init__(app)
		self.trap: Callable[[HTTPResponse, HTTPRequest], Any] = trap

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		res: HTTPResponse = await respond(self.app, request)
		if res.headers is None:
			res.headers = {}
		updated: Any = await awaited(self.trap(res, request))
		return res if updated is None else updated


class Date(Trap):
	"""Sets the `date` header of responses."""

	def __init__(self, app: TApp, present: Callable[[], datetime] | None = None):
		super().__init__(app, self.stamp)
		self.present: Callable[[], datetime] = present or now

	def stamp(self, response: HTTPResponse, request: HTTPRequest) -> None:
		response.setHeader("date", httpdate(self.present()))


class Permanent(Trap):
	"""Marks requests as permanent, so that redirects default to `301`,
	and sets the `expires` header of responses far in the future."""

	def __init__(self, app: TApp, future: Callable[[], datetime] | None = None):
		super().__init__(Tap(app, self.mark), self.expire)
		self.future: Callable[[], datetime] = future or (
			lambda: now() + PERMANENT_DURATION
		)

	def mark(self, request: HTTPRequest) -> HTTPRequest:
		return request.derive(permanent=True)

	def expire(self, response: HTTPResponse, request: HTTPRequest) -> None:
		response.setHeader("expires", httpdate(self.future()))


# -----------------------------------------------------------------------------
#
# ERRORS & LOGGING
#
# -----------------------------------------------------------------------------


class Error(Decorator):
	"""Turns exceptions raised by the app into `500` responses, or into the
	status of an `HTTPRequestError`. Tracebacks are only sent to clients in
	`debug` mode."""

	def __init__(self, app: TApp, debug: bool = DEBUG):
		super().__init__(app)
		self.debug: bool = debug

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		try:
			return await respond(self.app, request)
		except HTTPRequestError as e:
			status: int = e.status or 500
			(error if status >= 500 else warning)(
				"Request failed",
				Method=request.method,
				Path=request.path,
				Status=status,
				Reason=e.message,
			)
			if isinstance(e.payload, str) or isinstance(e.payload, bytes):
				return HTTPResponse.Create(
					e.payload, contentType=e.contentType or "text/plain", status=status
				)
			elif e.payload is not None:
				return json(e.payload, status=status).setHeader(
					"content-type", e.contentType or "application/json"
				)
			return responseForStatus(status, e.message)
		except Exception as e:
			exception(e, f"Error when handling {request.method} {request.path}")
			return responseForStatus(
				500, "".join(traceback.format_exception(e)) if self.debug else None
			)


def stamp(line: str) -> str:
	return f"{datetime.now(timezone.utc).isoformat()} {line}"


class Log(Decorator):
	"""Logs a line before and after each request, and when the app fails.
	Lines go to the structured logger unless a `log` function is given,
	and `stamp` prefixes them, with an ISO timestamp by default."""

	def __init__(
		self,
		app: TApp,
		log: Callable[[str], Any] | None = None,
		stamp: Callable[[str], str] = stamp,
	):
		super().__init__(app)
		self.log: Callable[[str], Any] | None = log or (info if LOG_REQUESTS else None)
		self.stamp: Callable[[str], str] = stamp

	def write(self, line: str) -> None:
		if self.log:
			self.log(self.stamp(line))

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		remote: str = f"{request.remoteHost}:{request.remotePort}"
		line: str = f"{request.method} {request.path} {request.protocol}"
		self.write(f"{remote} -->     {line}")
		try:
			res: HTTPResponse = await respond(self.app, request)
		except Exception as e:
			self.write(f"{remote} !!!     {line} {e}")
			raise
		self.write(
			f"{remote} <== {res.status} {line} {res.headers.get('content-length', '-')}"
		)
		return res


# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------


class Time(Decorator):
	"""Sets `x-response-time` to the time spent in the app in milliseconds,
	not including the streaming of the body."""

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		started: float = time.monotonic()
		res: HTTPResponse = await respond(self.app, request)
		res.setHeader("x-response-time", int((time.monotonic() - started) * 1000))
		return res


class Headers(Decorator):
	"""Adds the given headers to responses that don't already have them."""

	def __init__(self, app: TApp, headers: dict[str, str]):
		super().__init__(app)
		self.headers: dict[str, str] = {headername(k): v for k, v in headers.items()}

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		res: HTTPResponse = await respond(self.app, request)
		for k, v in self.headers.items():
			if k not in res.headers:
				res.headers[k] = v
		return res


class ContentLength(Decorator):
	"""Loads streamed bodies so that responses always have a
	`content-length`, unless they use a transfer encoding."""

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		res: HTTPResponse = await respond(self.app, request)
		if (
			hasNoBody(res.status)
			or "content-length" in res.headers
			or "transfer-encoding" in res.headers
		):
			return res
		payload: bytes = await res.load()
		res.body = HTTPBodyBlob(payload)
		res.setHeader("content-length", len(payload))
		return res


def Decorators(decorators: Iterable[Callable[[TApp], TApp]], app: TApp) -> TApp:
	"""Wraps the app in the decorators, the first one being the outermost."""
	for decorator in reversed(list(decorators)):
		app = decorator(app)
	return app


# EOF

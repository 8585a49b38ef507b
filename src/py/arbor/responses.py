from html import escape
from typing import Any, ClassVar
from urllib.parse import urljoin

from .http.model import HTTPRequest, HTTPResponse
from .http.status import HTTP_STATUS, hasNoBody
from .model import App, TApp
from .utils.json import json as asJSON

__doc__ = """
Producers: functions that build canonical responses, and the apps that
wrap them.
"""

# Statuses used by redirections
PERMANENT: int = 301
TEMPORARY: int = 307

# -----------------------------------------------------------------------------
#
# CONTENT
#
# -----------------------------------------------------------------------------


def ok(
	content: Any = "", contentType: str = "text/plain", status: int = 200
) -> HTTPResponse:
	"""Returns a response with the given content, which is anything
	`HTTPResponse.Create` supports."""
	return HTTPResponse.Create(
		"" if content is None else content, contentType=contentType, status=status
	)


content = ok


def json(value: Any, indent: int | str | None = None, status: int = 200) -> HTTPResponse:
	"""Returns a response with the value serialized as JSON."""
	return ok(asJSON(value, indent), "application/json", status)


class Content(App):
	"""An app that always responds with the same content. Generators can
	only be consumed once, so the content should be text or bytes."""

	def __init__(
		self, content: Any = "", contentType: str = "text/plain", status: int = 200
	):
		self.content: Any = content
		self.contentType: str = contentType
		self.status: int = status

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		return ok(self.content, self.contentType, self.status)


# -----------------------------------------------------------------------------
#
# STATUS
#
# -----------------------------------------------------------------------------


def responseForStatus(status: int, message: str | None = None) -> HTTPResponse:
	"""Returns the response for the given status, with a plain text body
	like `Not Found: GET /path` unless the status has no body."""
	if status not in HTTP_STATUS:
		raise ValueError(f"Unknown status code: {status}")
	if hasNoBody(status):
		return HTTPResponse.Create(status=status)
	text: str = (
		f"{HTTP_STATUS[status]}: {message}" if message else HTTP_STATUS[status]
	)
	return HTTPResponse.Create(f"{text}\r\n", contentType="text/plain", status=status)


def appForStatus(status: int) -> TApp:
	"""Returns an app that responds with the given status, mentioning
	the request method and path."""

	def app(request: HTTPRequest) -> HTTPResponse:
		return responseForStatus(status, f"{request.method} {request.path}")

	app.__name__ = app.__qualname__ = f"appForStatus({status})"
	return app


def notModified() -> HTTPResponse:
	return responseForStatus(304)


badRequest: TApp = appForStatus(400)
notFound: TApp = appForStatus(404)
methodNotAllowed: TApp = appForStatus(405)
notAcceptable: TApp = appForStatus(406)
noLanguage: TApp = notAcceptable

# -----------------------------------------------------------------------------
#
# REDIRECTS
#
# -----------------------------------------------------------------------------


def redirectStatus(
	request: HTTPRequest,
	status: int | None = None,
	permanent: bool | None = None,
	default: int | None = None,
) -> int:
	"""Returns the status of a redirection, which is the first of: the
	explicit status, 301/307 when `permanent` is explicitly given, 301 when
	the request has been marked as permanent, the producer's default and
	finally 307."""
	if status is not None:
		return status
	elif permanent is not None:
		return PERMANENT if permanent else TEMPORARY
	elif request.permanent:
		return PERMANENT
	elif default is not None:
		return default
	else:
		return TEMPORARY


def redirect(
	request: HTTPRequest,
	location: str,
	status: int | None = None,
	tree: bool = False,
	*,
	permanent: bool | None = None,
	default: int | None = None,
) -> HTTPResponse:
	"""Redirects to the location, resolved against the request URL. Tree
	redirects append the part of the path that is left to route."""
	location = urljoin(request.url, location)
	if tree:
		location = urljoin(location, request.pathInfo.removeprefix("/"))
	return HTTPResponse.Create(
		f'Go to <a href="{escape(location)}">{escape(location)}</a>',
		contentType="text/html",
		headers={"location": location},
		status=redirectStatus(request, status, permanent, default),
	)


def permanentRedirect(
	request: HTTPRequest, location: str, status: int | None = None, tree: bool = False
) -> HTTPResponse:
	return redirect(request, location, status, tree, default=PERMANENT)


def temporaryRedirect(
	request: HTTPRequest, location: str, status: int | None = None, tree: bool = False
) -> HTTPResponse:
	return redirect(request, location, status, tree, default=TEMPORARY)


class Redirect(App):
	"""An app that redirects to the given location."""

	DEFAULT: ClassVar[int | None] = None
	TREE: ClassVar[bool] = False

	def __init__(
		self,
		location: str = "",
		status: int | None = None,
		tree: bool | None = None,
		*,
		permanent: bool | None = None,
	):
		self.location: str = location
		self.status: int | None = status
		self.tree: bool = self.TREE if tree is None else tree
		self.permanent: bool | None = permanent

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		return redirect(
			request,
			self.location,
			self.status,
			self.tree,
			permanent=self.permanent,
			default=self.DEFAULT,
		)

	def __repr__(self) -> str:
		return f"({self.__class__.__name__} {self.location!r})"


class PermanentRedirect(Redirect):
	DEFAULT = PERMANENT


class TemporaryRedirect(Redirect):
	DEFAULT = TEMPORARY


class RedirectTree(Redirect):
	"""Redirects into the subtree at the location, keeping the part of
	the path that is left to route."""

	TREE = True


class PermanentRedirectTree(RedirectTree):
	DEFAULT = PERMANENT


class TemporaryRedirectTree(RedirectTree):
	DEFAULT = TEMPORARY


# EOF

import importlib
from typing import Any, Callable, ClassVar, Iterable, Mapping
from urllib.parse import unquote

from .http.model import HTTPRequest, HTTPResponse
from .http.negotiation import bestMatch
from .model import App, TApp, awaited, lookup, respond
from .responses import methodNotAllowed as methodNotAllowedApp
from .responses import notAcceptable as notAcceptableApp
from .responses import notFound as notFoundApp

__doc__ = """
Routers, which dispatch a request to one of their apps based on the path
left to route, the method or the negotiated content.
"""

# -----------------------------------------------------------------------------
#
# PATH
#
# -----------------------------------------------------------------------------


class Branch(App):
	"""Routes on the next segment of the path left to route, which is
	percent-decoded and looked up in `paths`. The selected app receives
	a request where the segment has moved to the `scriptName`."""

	def __init__(self, paths: Any, notFound: TApp = notFoundApp):
		self.paths: Any = paths
		self.notFound: TApp = notFound

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		segment: str | None = request.segment
		if segment is None:
			return await respond(self.notFound, request)
		try:
			key: str = unquote(segment, errors="strict")
		except UnicodeDecodeError:
			return await respond(self.notFound, request)
		app: TApp | None = lookup(self.paths, key)
		if app is None:
			return await respond(self.notFound, request)
		return await respond(app, request.advance(segment))


class Cap(App):
	"""Only lets through requests that have no path left to route."""

	def __init__(self, app: TApp, notFound: TApp = notFoundApp):
		self.app: TApp = app
		self.notFound: TApp = notFound

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		if request.pathInfo in ("", "/"):
			return await respond(self.app, request)
		else:
			return await respond(self.notFound, request)


class FirstFound(App):
	"""Tries each app in turn, moving to the next one only when the
	response is a 404. The last 404 is returned when no app finds
	anything."""

	def __init__(self, cascade: Iterable[TApp]):
		self.cascade: list[TApp] = list(cascade)

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		res: HTTPResponse | None = None
		for app in self.cascade:
			res = await respond(app, request)
			if res.status != 404:
				return res
		return res if res else await respond(notFoundApp, request)


class Select(App):
	"""Delegates to the app returned by the (possibly async) selector."""

	def __init__(self, selector: Callable[[HTTPRequest], Any]):
		self.selector: Callable[[HTTPRequest], Any] = selector

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		app: TApp = await awaited(self.selector(request))
		return await respond(app, request)


class Module(App):
	"""Delegates to the app defined in the given module, which is only
	imported on the first request."""

	def __init__(self, name: str, attribute: str = "app"):
		self.name: str = name
		self.attribute: str = attribute
		self.app: TApp | None = None

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		if self.app is None:
			self.app = getattr(importlib.import_module(self.name), self.attribute)
		return await respond(self.app, request)

	def __repr__(self) -> str:
		return f"(Module {self.name}:{self.attribute})"


# -----------------------------------------------------------------------------
#
# METHOD
#
# -----------------------------------------------------------------------------


class Method(App):
	def __init__(
		self, methods: Mapping[str, TApp], methodNotAllowed: TApp = methodNotAllowedApp
	):
		self.methods: Mapping[str, TApp] = methods
		self.methodNotAllowed: TApp = methodNotAllowed

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		app: TApp | None = self.methods.get(request.method)
		return await respond(
			self.methodNotAllowed if app is None else app,
			request,
		)


# -----------------------------------------------------------------------------
#
# NEGOTIATION
#
# -----------------------------------------------------------------------------


class Negotiator(App):
	"""Routes to the app whose key best matches the preferences expressed
	by the request header. The negotiated value is recorded in the request
	`terms` under the response header name, and a `200` response is
	tagged with it when `annotate` is set."""

	REQUEST_HEADER: ClassVar[str | Callable[[HTTPRequest], str | None]] = "accept"
	RESPONSE_HEADER: ClassVar[str] = "content-type"
	ANNOTATE: ClassVar[bool] = True

	def __init__(
		self,
		choices: Mapping[str, TApp],
		notAcceptable: TApp = notAcceptableApp,
		*,
		requestHeader: str | Callable[[HTTPRequest], str | None] | None = None,
		responseHeader: str | None = None,
		annotate: bool | None = None,
	):
		self.choices: Mapping[str, TApp] = choices
		self.notAcceptable: TApp = notAcceptable
		self.requestHeader: str | Callable[[HTTPRequest], str | None] = (
			self.REQUEST_HEADER if requestHeader is None else requestHeader
		)
		self.responseHeader: str = responseHeader or self.RESPONSE_HEADER
		self.annotate: bool = self.ANNOTATE if annotate is None else annotate

	def preferences(self, request: HTTPRequest) -> str | None:
		"""Returns the preferences expressed by the request."""
		return (
			self.requestHeader(request)
			if callable(self.requestHeader)
			else request.header(self.requestHeader)
		)

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		value: str | None = bestMatch(self.choices.keys(), self.preferences(request))
		if value is None:
			return await respond(self.notAcceptable, request)
		res = await respond(
			self.choices[value],
			request.derive(terms={**request.terms, self.responseHeader: value}),
		)
		if self.annotate and res.status == 200:
			res.setHeader(self.responseHeader, value)
		return res


class ContentType(Negotiator):
	REQUEST_HEADER = "accept"
	RESPONSE_HEADER = "content-type"


class Language(Negotiator):
	REQUEST_HEADER = "accept-language"
	RESPONSE_HEADER = "language"


class Charset(Negotiator):
	REQUEST_HEADER = "accept-charset"
	RESPONSE_HEADER = "charset"


class Encoding(Negotiator):
	REQUEST_HEADER = "accept-encoding"
	RESPONSE_HEADER = "encoding"


# Ports assumed when the server does not tell its own
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


def hostAndPort(request: HTTPRequest) -> str:
	"""Returns `{host}:{port}`, where the host comes from the `Host` header
	(without its port) and the port is the server's, or the default port
	of the scheme when unknown."""
	host: str | None = request.host
	if host:
		# IPv6 hosts are bracketed, as in `[::1]:8080`
		name, sep, suffix = host.rpartition(":")
		if sep and suffix.isdigit():
			host = name
	port: int | str = (
		request.port
		if request.port is not None
		else DEFAULT_PORTS.get(request.scheme, "*")
	)
	return f"{host or '*'}:{port}"


class Host(Negotiator):
	"""Routes on the `{host}:{port}` the request was sent to, with keys
	like `example.com:80`. Responses are not tagged."""

	REQUEST_HEADER = staticmethod(hostAndPort)
	RESPONSE_HEADER = "host"
	ANNOTATE = False


# EOF

from pprint import pformat
from typing import Any, Callable

from .config import DEFAULT_ENCODING
from .http.model import HTTPRequest, HTTPResponse
from .model import App, TApp, awaited, respond
from .responses import badRequest as badRequestApp
from .responses import json, ok
from .routing import Method
from .utils.json import unjson

__doc__ = """
Adapters turn functions that work with values instead of requests or
responses into apps.
"""


class Json(App):
	"""Serializes the value returned by the app as a JSON response."""

	def __init__(self, app: Callable[[HTTPRequest], Any], indent: int | str | None = None):
		self.app: Callable[[HTTPRequest], Any] = app
		self.indent: int | str | None = indent

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		return json(await awaited(self.app(request)), self.indent)


class ContentRequest(App):
	"""Loads the request body as text and calls `app(content, request)`.
	Bodies that aren't valid text are bad requests."""

	def __init__(
		self,
		app: Callable[[Any, HTTPRequest], Any],
		badRequest: TApp = badRequestApp,
	):
		self.app: Callable[[Any, HTTPRequest], Any] = app
		self.badRequest: TApp = badRequest

	def parse(self, content: str) -> Any:
		return content

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		try:
			content: Any = self.parse((await request.load()).decode(DEFAULT_ENCODING))
		except ValueError:
			return await respond(self.badRequest, request)
		res = await awaited(self.app(content, request))
		if not isinstance(res, HTTPResponse):
			raise TypeError(f"App {self.app} did not return an HTTPResponse: {res!r}")
		return res


class JsonRequest(ContentRequest):
	"""Parses the request body as JSON and calls `app(value, request)`.
	Malformed JSON is a bad request."""

	def parse(self, content: str) -> Any:
		return unjson(content)


def Inspect(app: Callable[[HTTPRequest], Any]) -> App:
	"""Responds to `GET` requests with a readable dump of the value returned
	by the app, for debugging."""

	async def inspect(request: HTTPRequest) -> HTTPResponse:
		return ok(pformat(await awaited(app(request))), "text/plain")

	return Method({"GET": inspect})


# EOF

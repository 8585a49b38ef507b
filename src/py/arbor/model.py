from abc import ABC, abstractmethod
from inspect import isawaitable
from typing import Any, Awaitable, Callable, Mapping, TypeAlias

from .http.model import HTTPRequest, HTTPResponse

__doc__ = """
The app algebra: an app is anything that takes an `HTTPRequest` and returns
an `HTTPResponse`, either directly or as an awaitable. Plain functions and
coroutine functions are apps, and so are the instances of `App`, which is
what all the combinators of this package are.
"""

# An app, as a function or `App` instance.
TApp: TypeAlias = Callable[
	[HTTPRequest], HTTPResponse | Awaitable[HTTPResponse]
]


async def awaited(value: Any) -> Any:
	"""Normalizes the result of calling a sync or async function."""
	while isawaitable(value):
		value = await value
	return value


async def respond(app: TApp, request: HTTPRequest) -> HTTPResponse:
	"""Calls the app with the request and returns its response."""
	res = await awaited(app(request))
	if not isinstance(res, HTTPResponse):
		raise TypeError(f"App {app} did not return an HTTPResponse: {res!r}")
	return res


def lookup(paths: Any, key: str) -> TApp | None:
	"""Looks up the key in a path map, which can be a mapping or any object
	exposing a `get(key)` method."""
	if isinstance(paths, Mapping) or hasattr(paths, "get"):
		return paths.get(key)
	else:
		raise TypeError(f"Path map does not support lookups: {paths!r}")


class App(ABC):
	"""Base class for the combinators, which are async callables."""

	@abstractmethod
	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		...

	async def __call__(self, request: HTTPRequest) -> HTTPResponse:
		return await self.handle(request)

	def __repr__(self) -> str:
		return f"({self.__class__.__name__})"


class Decorator(App):
	"""An app that wraps another one."""

	def __init__(self, app: TApp):
		self.app: TApp = app

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		return await respond(self.app, request)

	def __repr__(self) -> str:
		return f"({self.__class__.__name__} {self.app!r})"


# EOF

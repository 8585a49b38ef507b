from typing import Any, AsyncIterator, Awaitable, Callable, TypeAlias
from urllib.parse import quote

from ..http.model import HTTPBodyAsyncStream, HTTPRequest, HTTPResponse, iterBody
from ..model import TApp, respond
from ..utils.logging import event, warning

# --
# ## ASGI Bridge
#
# Exposes apps through the ASGI gateway, so that they can be run by any
# ASGI server.

# SEE: https://asgi.readthedocs.io/en/latest/specs/main.html

TScope: TypeAlias = dict[str, Any]
TMessage: TypeAlias = dict[str, Any]
TReceive: TypeAlias = Callable[[], Awaitable[TMessage]]
TSend: TypeAlias = Callable[[TMessage], Awaitable[None]]
TASGIApp: TypeAlias = Callable[[TScope, TReceive, TSend], Awaitable[None]]


class ASGIBridge:
	"""Creates `HTTPRequest` objects from the ASGI scope and messages, and
	writes out `HTTPResponse` objects as ASGI messages."""

	def __init__(self, app: TApp):
		self.app: TApp = app

	async def run(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		protocol: str = scope["type"]
		if protocol == "http":
			request = self.read(scope, receive)
			response = await respond(self.app, request)
			await self.write(response, send)
		elif protocol == "lifespan":
			await self.lifespan(receive, send)
		else:
			raise ValueError(f"Unsupported ASGI protocol: {protocol}")

	def read(self, scope: TScope, receive: TReceive) -> HTTPRequest:
		"""Creates the request from the scope, with a body streamed from
		`receive`."""
		# The path is kept percent-encoded, as routing decodes each segment
		raw_path: bytes | None = scope.get("raw_path")
		path: str = (
			raw_path.decode("latin-1").split("?", 1)[0]
			if raw_path
			else quote(scope.get("path", "/"))
		)
		headers: dict[str, str] = {}
		for name, value in scope.get("headers", ()):
			k: str = name.decode("latin-1").lower()
			v: str = value.decode("latin-1")
			headers[k] = (
				v if k not in headers else f"{headers[k]}{'; ' if k == 'cookie' else ', '}{v}"
			)
		client: tuple[str, int] | None = scope.get("client")
		server: tuple[str, int | None] | None = scope.get("server")
		query: bytes = scope.get("query_string", b"")
		return HTTPRequest(
			method=scope.get("method", "GET"),
			path=path or "/",
			query=query.decode("latin-1") or None,
			headers=headers,
			body=HTTPBodyAsyncStream(self.readBody(receive)),
			protocol=f"HTTP/{scope.get('http_version', '1.1')}",
			scheme=scope.get("scheme", "http"),
			remoteHost=client[0] if client else None,
			remotePort=client[1] if client else None,
			port=server[1] if server else None,
		)

	async def readBody(self, receive: TReceive) -> AsyncIterator[bytes]:
		while True:
			message: TMessage = await receive()
			if message["type"] == "http.request":
				if chunk := message.get("body", b""):
					yield chunk
				if not message.get("more_body", False):
					break
			elif message["type"] == "http.disconnect":
				break
			else:
				warning("Unsupported ASGI message", Type=message["type"])

	async def write(self, response: HTTPResponse, send: TSend) -> None:
		# FROM: https://asgi.readthedocs.io/en/latest/specs/www.html
		# A response that is given to the server with no Content-Length may
		# be chunked as the server sees fit.
		await send(
			{
				"type": "http.response.start",
				"status": response.status,
				"headers": [
					(k.encode("latin-1"), v.encode("latin-1"))
					for k, v in response.headers.items()
				],
			}
		)
		async for chunk in iterBody(response.body):
			await send({"type": "http.response.body", "body": chunk, "more_body": True})
		# We notify that it's the end of the body with a 0-byte payload.
		await send({"type": "http.response.body", "body": b"", "more_body": False})

	async def lifespan(self, receive: TReceive, send: TSend) -> None:
		"""Acknowledges the lifespan messages, as apps have nothing to
		start or stop."""
		# SEE: https://asgi.readthedocs.io/en/latest/specs/lifespan.html
		while True:
			message: TMessage = await receive()
			if message["type"] == "lifespan.startup":
				event("lifespan", "startup", origin="asgi")
				await send({"type": "lifespan.startup.complete"})
			elif message["type"] == "lifespan.shutdown":
				event("lifespan", "shutdown", origin="asgi")
				await send({"type": "lifespan.shutdown.complete"})
				return


def asgi(app: TApp) -> TASGIApp:
	"""Returns an ASGI 3 application that serves the given app."""
	bridge = ASGIBridge(app)

	async def application(scope: TScope, receive: TReceive, send: TSend) -> None:
		await bridge.run(scope, receive, send)

	return application


# EOF

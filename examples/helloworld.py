"""
Basic Hello World Example

Features shown:
- Branching on path segments and methods
- Content negotiation between text and JSON
- Decorators for logging, errors and response time

Usage (with any ASGI server):
    uvicorn examples.helloworld:application

Test with:
    curl http://localhost:8000/hello
    curl -H "Accept: application/json" http://localhost:8000/hello
    curl http://localhost:8000/hello/anyone   # Not Found
"""

from arbor import (
	Branch,
	Cap,
	Content,
	ContentType,
	Decorators,
	Error,
	HTTPRequest,
	HTTPResponse,
	Log,
	Method,
	Time,
	asgi,
	json,
	ok,
)
from arbor.utils.logging import info

COUNT: int = 0


def hello(request: HTTPRequest) -> HTTPResponse:
	"""Responds with Hello World message and increments counter."""
	global COUNT
	COUNT += 1
	info(f"Hello World request #{COUNT}", Path=request.path)
	return ok(f"Hello, World! #{COUNT}\n")


app = Decorators(
	[Log, Error, Time],
	Branch(
		{
			"": Content("Try /hello\n"),
			"hello": Cap(
				Method(
					{
						"GET": ContentType(
							{
								"text/plain": hello,
								"application/json": lambda _: json({"hello": "world"}),
							}
						)
					}
				)
			),
		}
	),
)

application = asgi(app)

# EOF

"""
Tests for the adapters.
"""

from arbor.adapters import ContentRequest, Inspect, Json, JsonRequest
from arbor.http.model import HTTPRequest
from arbor.responses import Content, ok


def test_json(client):
	res, body = client(Json(lambda request: {"path": request.path}), "/x")
	assert res.status == 200
	assert res.headers["content-type"] == "application/json"
	assert body == b'{"path": "/x"}'


def test_json_indent(client):
	async def value(request: HTTPRequest):
		return [1]

	_, body = client(Json(value, indent=2))
	assert body == b"[\n  1\n]"


def test_content_request(client):
	received: list[tuple[str, str]] = []

	def app(content: str, request: HTTPRequest):
		received.append((content, request.path))
		return ok(content.upper())

	res, body = client(ContentRequest(app), "/x", "POST", body="héllo")
	assert body == "HÉLLO".encode("utf8")
	assert received == [("héllo", "/x")]
	res, _ = client(ContentRequest(app), "/x", "POST", body=b"\xff")
	assert res.status == 400


def test_json_request(client):
	def app(value, request: HTTPRequest):
		return ok(str(value["a"]))

	_, body = client(JsonRequest(app), "/", "POST", body='{"a": 1}')
	assert body == b"1"
	res, body = client(JsonRequest(app), "/x", "POST", body="{nope")
	assert res.status == 400
	assert body == b"Bad Request: POST /x\r\n"
	res, body = client(
		JsonRequest(app, Content("custom", status=400)), "/", "POST", body=""
	)
	assert (res.status, body) == (400, b"custom")


def test_inspect(client):
	app = Inspect(lambda request: {"b": [1, 2], "a": "x"})
	res, body = client(app)
	assert res.headers["content-type"] == "text/plain"
	assert body == b"{'a': 'x', 'b': [1, 2]}"
	res, _ = client(app, method="POST")
	assert res.status == 405


# EOF

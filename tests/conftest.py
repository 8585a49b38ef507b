"""
pytest configuration and fixtures.
"""

import asyncio
import io
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

from arbor.http.model import HTTPRequest, HTTPResponse
from arbor.model import TApp, respond
from arbor.utils import logging


async def fetch(app: TApp, request: HTTPRequest) -> tuple[HTTPResponse, bytes]:
	"""Returns the response of the app along with its loaded body."""
	res = await respond(app, request)
	return res, await res.load()


def serve(
	app: TApp,
	path: str = "/",
	method: str = "GET",
	headers: dict[str, str] | None = None,
	body: bytes | str | None = None,
	**attributes: Any,
) -> tuple[HTTPResponse, bytes]:
	"""Runs a request through the app, returning the response and its body."""
	return asyncio.run(
		fetch(app, HTTPRequest.Create(method, path, headers, body, **attributes))
	)


@pytest.fixture
def client() -> Callable[..., tuple[HTTPResponse, bytes]]:
	return serve


class Recorder:
	"""An app that records the requests it receives."""

	def __init__(self, content: str = "ok", status: int = 200):
		self.requests: list[HTTPRequest] = []
		self.content: str = content
		self.status: int = status

	def __call__(self, request: HTTPRequest) -> HTTPResponse:
		self.requests.append(request)
		return HTTPResponse.Create(self.content, "text/plain", status=self.status)

	@property
	def last(self) -> HTTPRequest:
		return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
	return Recorder()


@pytest.fixture
def tree(tmp_path: Path) -> Path:
	"""A file tree with a `root` directory to serve, and a secret file
	next to it."""
	root = tmp_path / "root"
	(root / "docs").mkdir(parents=True)
	(root / "numbers.txt").write_text("1234")
	(root / "docs" / "index.html").write_text("<h1>Docs</h1>")
	(root / "hello world.txt").write_text("Hello")
	(tmp_path / "secret.txt").write_text("secret")
	return root


@pytest.fixture
def make_recorder() -> type[Recorder]:
	return Recorder


@pytest.fixture
def logs():
	"""Captures the log output, at the debug level."""
	out = io.StringIO()
	level = logging.LEVEL
	logging.setStream(out)
	logging.setLevel("debug")
	yield out
	logging.setStream(sys.stderr)
	logging.setLevel(level)


# EOF

from dataclasses import dataclass
from datetime import datetime, timezone
from http.cookies import SimpleCookie
from typing import Any, Callable
from uuid import uuid4

from .config import SESSION_COOKIE
from .http.model import HTTPRequest, HTTPResponse
from .model import App, TApp, respond
from .responses import json, redirect, responseForStatus

__doc__ = """
Sessions give each client its own app, created by a factory when the
session starts. `CookieSession` tracks clients with a cookie and
`PathSession` with a path prefix, so that each browser window can have
its own session.

Sessions live in memory, in a `SessionStore`, and are never expired.
"""

# The path used to check that the client accepts cookies
COOKIE_CHECK: str = "~session/"


@dataclass
class Session:
	id: str
	lastAccess: datetime
	route: TApp | None = None

	def touch(self) -> "Session":
		self.lastAccess = datetime.now(timezone.utc)
		return self

	def asPrimitive(self) -> dict[str, Any]:
		return {"id": self.id, "lastAccess": self.lastAccess.isoformat()}


# Creates the app of a new session
TSessionFactory = Callable[[Session], TApp]


class SessionStore:
	"""Keeps the sessions by id."""

	def __init__(self) -> None:
		self.sessions: dict[str, Session] = {}

	def nextId(self) -> str:
		while True:
			sid = str(uuid4())
			if sid not in self.sessions:
				return sid

	def create(self, factory: TSessionFactory) -> Session:
		session = Session(self.nextId(), datetime.now(timezone.utc))
		self.sessions[session.id] = session
		session.route = factory(session)
		return session

	def get(self, sid: str) -> Session | None:
		return self.sessions.get(sid)

	def __contains__(self, sid: str) -> bool:
		return sid in self.sessions

	def __len__(self) -> int:
		return len(self.sessions)


class CookieSession(App):
	"""Routes requests to the app of the session designated by the session
	cookie. Clients without a session are redirected to a check path with
	a new cookie, which sends them back where they were when they accept
	cookies."""

	def __init__(
		self,
		factory: TSessionFactory,
		store: SessionStore | None = None,
		cookie: str = SESSION_COOKIE,
	):
		self.factory: TSessionFactory = factory
		self.store: SessionStore = SessionStore() if store is None else store
		self.cookie: str = cookie

	def setCookie(self, session: Session, path: str) -> str:
		cookie: SimpleCookie = SimpleCookie()
		cookie[self.cookie] = session.id
		cookie[self.cookie]["path"] = path
		return cookie[self.cookie].OutputString()

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		sid: str | None = request.cookie(self.cookie)
		if request.pathInfo.startswith(f"/{COOKIE_CHECK}"):
			# Cookie check redirects stay temporary, even for permanent requests
			if sid:
				return redirect(request, "../", permanent=False)
			else:
				return HTTPResponse.Create(
					"Access requires cookies", contentType="text/plain", status=404
				)
		session: Session | None = self.store.get(sid) if sid else None
		if session and session.route:
			session.touch()
			return await respond(session.route, request.derive(session=session))
		session = self.store.create(self.factory)
		return redirect(
			request, f"{request.scriptName}{COOKIE_CHECK}", permanent=False
		).setHeader("set-cookie", self.setCookie(session, request.scriptName))


class PathSession(App):
	"""Creates a session for each request to `/`, responding with the session
	as JSON, and routes `/{id}/…` to the app of the session."""

	def __init__(self, factory: TSessionFactory, store: SessionStore | None = None):
		self.factory: TSessionFactory = factory
		self.store: SessionStore = SessionStore() if store is None else store

	async def handle(self, request: HTTPRequest) -> HTTPResponse:
		if request.pathInfo == "/":
			return json(self.store.create(self.factory))
		sid: str | None = request.segment
		session: Session | None = self.store.get(sid) if sid else None
		if session and session.route:
			session.touch()
			return await respond(
				session.route, request.advance(session.id).derive(session=session)
			)
		return responseForStatus(404, "Session does not exist")


# EOF

from .http.model import (
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
)  # NOQA: F401
from .model import App, Decorator, awaited  # NOQA: F401
from .responses import (
	Content,
	PermanentRedirect,
	PermanentRedirectTree,
	Redirect,
	RedirectTree,
	TemporaryRedirect,
	TemporaryRedirectTree,
	badRequest,
	content,
	json,
	methodNotAllowed,
	notAcceptable,
	notFound,
	ok,
	redirect,
)  # NOQA: F401
from .routing import (
	Branch,
	Cap,
	Charset,
	ContentType,
	Encoding,
	FirstFound,
	Host,
	Language,
	Method,
	Module,
	Select,
)  # NOQA: F401
from .decorators import (
	ContentLength,
	Date,
	Decorators,
	Error,
	Headers,
	Log,
	Permanent,
	Tap,
	Time,
	Trap,
)  # NOQA: F401
from .adapters import ContentRequest, Inspect, Json, JsonRequest  # NOQA: F401
from .sessions import CookieSession, PathSession, SessionStore  # NOQA: F401
from .services.files import File, FileTree, file  # NOQA: F401
from .bridge.asgi import asgi  # NOQA: F401

# EOF

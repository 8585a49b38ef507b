import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, NamedTuple, TextIO, TypeAlias

from mypy_extensions import KwArg

from ..config import LOG_LEVEL
from .term import Term

__doc__ = """
Structured logging for arbor. Each logging function takes a message and
arbitrary keyword context, which is rendered as `Key=value` pairs after the
message. Output goes to `ERR` (stderr by default), colored unless `NO_COLOR`
is set (see `term`).
"""

ERR: TextIO = sys.stderr

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="arbor")


class LogType(Enum):
	Message = 0
	Event = 20


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40
	Exception = 50


LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

LOG_LEVELS: dict[str, LogLevel] = {_.name.lower(): _ for _ in LogLevel}


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: Any = None
	context: dict[str, Any] | None = None


# A logging function, taking a message and keyword context
TLogger: TypeAlias = Callable[[str, KwArg(Any)], LogEntry]


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the minimum level at which entries are written."""
	global LEVEL
	LEVEL = LOG_LEVELS.get(level.lower(), LogLevel.Info) if isinstance(level, str) else level
	return LEVEL


def setStream(stream: TextIO) -> TextIO:
	global ERR
	ERR = stream
	return ERR


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value < LEVEL.value:
		return entry
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: Any = None,
	context: dict[str, Any],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
	)


def debug(message: str, *, origin: str | None = None, **context: Any) -> LogEntry:
	return send(
		entry(message=message, level=LogLevel.Debug, origin=origin, context=context)
	)


def info(message: str, *, origin: str | None = None, **context: Any) -> LogEntry:
	return send(entry(message=message, origin=origin, context=context))


def warning(message: str, *, origin: str | None = None, **context: Any) -> LogEntry:
	return send(
		entry(message=message, level=LogLevel.Warning, origin=origin, context=context)
	)


def error(
	message: str,
	code: int | str | None = None,
	*,
	origin: str | None = None,
	**context: Any,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			context=context,
		)
	)


def event(
	event: str, value: Any = None, *, origin: str | None = None, **context: Any
) -> LogEntry:
	return send(
		entry(
			name=event, value=value, type=LogType.Event, origin=origin, context=context
		)
	)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception and its traceback to the error stream, returning
	the exception so that this can be used as `raise exception(e)`."""
	if LogLevel.Exception.value < LEVEL.value:
		return exception
	try:
		stream = ERR
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Reporting must never raise, as this is called from exception handlers.
		pass
	return exception


def logged(item: TLogger) -> bool:
	"""Tells if the given logging function would currently write anything,
	so that costly context can be skipped with `logged(debug) and debug(…)`."""
	level: LogLevel | None = LOGGERS.get(item)
	return level is None or level.value >= LEVEL.value


LOGGERS: dict[TLogger, LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}

LEVEL: LogLevel = LOG_LEVELS.get(LOG_LEVEL.lower(), LogLevel.Info)

# EOF

import json as basejson
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, TypeAlias, cast

TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def asPrimitive(value: Any) -> Any:
	"""Converts the given value to a primitive value, that can be converted
	to JSON. Objects can take over by defining an `asPrimitive` method."""
	if value is None or type(value) in (bool, float, int, str):
		return value
	elif hasattr(value, "asPrimitive"):
		return value.asPrimitive()
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		return {k: asPrimitive(getattr(value, k)) for k in value._fields}
	elif isinstance(value, list) or isinstance(value, tuple) or isinstance(value, set):
		return [asPrimitive(v) for v in value]
	elif is_dataclass(value) and not isinstance(value, type):
		return {_.name: asPrimitive(getattr(value, _.name)) for _ in fields(value)}
	elif isinstance(value, Enum):
		return asPrimitive(value.value)
	elif isinstance(value, dict):
		return {asPrimitive(k): asPrimitive(v) for k, v in value.items()}
	elif isinstance(value, Decimal) or isinstance(value, Path):
		return str(value)
	elif isinstance(value, datetime) or isinstance(value, date):
		return value.isoformat()
	elif isinstance(value, bytes):
		return value.decode("utf8")
	else:
		return value


def json(value: Any, indent: int | str | None = None) -> bytes:
	"""Serializes the value as JSON, raising `TypeError` when it can't be."""
	return basejson.dumps(asPrimitive(value), indent=indent).encode("utf8")


def unjson(value: bytes | str) -> TJSON:
	"""Parses JSON, raising `ValueError` when malformed."""
	return cast(TJSON, basejson.loads(value))


# EOF

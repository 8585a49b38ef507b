import re
from typing import NamedTuple, Pattern

# SEE: https://www.rfc-editor.org/rfc/rfc9110#name-byte-ranges

RE_RANGES: Pattern[str] = re.compile(
	r"^\s*bytes\s*=\s*(\d*\s*-\s*\d*\s*(?:,\s*\d*\s*-\s*\d*\s*)*)$"
)
RE_RANGE: Pattern[str] = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")
RE_SEPARATOR: Pattern[str] = re.compile(r"\s*,\s*")

RANGE_UNIT: str = "bytes"


class ByteRange(NamedTuple):
	"""A half-open `[begin, end)` interval of bytes within a resource."""

	begin: int
	end: int

	@property
	def length(self) -> int:
		return self.end - self.begin

	def contentRange(self, size: int) -> str:
		"""Returns the `Content-Range` value for this range, which is
		inclusive on both ends."""
		return f"{RANGE_UNIT} {self.begin}-{self.end - 1}/{size}"


def interpretRange(text: str, size: int) -> ByteRange | None:
	"""Interprets a single range spec (`a-b`, `a-` or `-n`) against a resource
	of the given size."""
	match = RE_RANGE.match(text)
	if not match:
		return None
	first, last = match.group(1), match.group(2)
	if not first and not last:
		return None
	elif not first:
		return ByteRange(size - int(last), size)
	elif not last:
		return ByteRange(int(first), size)
	else:
		return ByteRange(int(first), int(last) + 1)


def interpretFirstRange(text: str, size: int) -> ByteRange | None:
	"""Interprets a `Range` header, returning the first continuous range
	it describes, or `None` when the header is not a valid bytes range.

	Following specs are merged into the first one as long as they start at
	or before its end, so `bytes=500-600,601-999` yields `[500, 1000)` while
	`bytes=0-0,-1` stops at `[0, 1)`. The result is not checked against the
	size, that's up to the caller."""
	match = RE_RANGES.match(text)
	if not match:
		return None
	specs: list[str] = RE_SEPARATOR.split(match.group(1).strip())
	merged: ByteRange | None = interpretRange(specs[0], size)
	if merged is None:
		return None
	for spec in specs[1:]:
		following = interpretRange(spec, size)
		if following is None or following.begin > merged.end:
			break
		merged = ByteRange(merged.begin, max(merged.end, following.end))
	return merged


# EOF

from typing import Iterable, NamedTuple

__doc__ = """
Quality-value matching for the `Accept*` family of headers. The same
matcher handles media types (`text/*;q=0.5`), language tags (`en` matches
`en-GB`) and plain tokens (charsets, encodings, hosts), with `*` matching
anything.
"""

# SEE: https://www.rfc-editor.org/rfc/rfc9110#name-content-negotiation-fields


class Preference(NamedTuple):
	"""One entry of an `Accept*` header."""

	value: str
	quality: float


def parseQuality(text: str) -> float:
	try:
		quality = float(text)
	except ValueError:
		return 0.0
	return min(max(quality, 0.0), 1.0)


def parsePreferences(header: str) -> list[Preference]:
	"""Parses a header like `text/html;level=1, text/*;q=0.3` into
	preferences. Media type parameters other than `q` are dropped."""
	res: list[Preference] = []
	for item in header.split(","):
		value, *params = (_.strip() for _ in item.split(";"))
		if not value:
			continue
		quality: float = 1.0
		for param in params:
			key, _, v = param.partition("=")
			if key.strip().lower() == "q":
				quality = parseQuality(v.strip())
		res.append(Preference(value.lower(), quality))
	return res


def fitness(preference: str, candidate: str) -> int:
	"""Returns how specifically `preference` matches `candidate`, or -1 when
	it doesn't match at all. Higher is more specific."""
	if preference == "*" or preference == "*/*":
		return 0
	elif preference == candidate:
		return 100
	elif "/" in preference and "/" in candidate:
		ptype, psub = preference.split("/", 1)
		ctype, csub = candidate.split("/", 1)
		if ptype == ctype and psub == "*":
			return 10
		elif ptype == "*" and psub == csub:
			return 5
		else:
			return -1
	elif candidate.startswith(preference + "-"):
		# Language range prefix, as in RFC 4647 basic filtering
		return 1 + preference.count("-")
	else:
		return -1


def quality(candidate: str, preferences: list[Preference]) -> tuple[float, int]:
	"""Returns the quality and fitness of the most specific preference
	matching the candidate."""
	best_fitness: int = -1
	best_quality: float = 0.0
	for pref in preferences:
		f = fitness(pref.value, candidate)
		if f > best_fitness:
			best_fitness = f
			best_quality = pref.quality
	return (best_quality, best_fitness)


def bestMatch(candidates: Iterable[str], header: str | None) -> str | None:
	"""Returns the candidate that best satisfies the `Accept*` header, or `None`
	when none is acceptable. An empty header accepts anything. Ties go to
	the candidate listed first."""
	preferences = parsePreferences(header or "*")
	if not preferences:
		preferences = parsePreferences("*")
	matched: str | None = None
	matched_score: tuple[float, int] = (0.0, -1)
	for candidate in candidates:
		q, f = quality(candidate.lower(), preferences)
		if f < 0 or q <= 0:
			continue
		if (q, f) > matched_score:
			matched = candidate
			matched_score = (q, f)
	return matched


# EOF

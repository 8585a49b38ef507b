from http import HTTPStatus

# Every standard status code mapped to its reason phrase
HTTP_STATUS: dict[int, str] = {_.value: _.phrase for _ in HTTPStatus}


def hasNoBody(status: int) -> bool:
	"""Tells if a response with the given status must not have an entity
	body (RFC 9110 §6.4.1): informational responses, 204 and 304."""
	return 100 <= status <= 199 or status == 204 or status == 304


# EOF

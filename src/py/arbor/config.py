from os import getenv

# Only ever enable this in development: it sends tracebacks to clients.
DEBUG: bool = getenv("ARBOR_DEBUG", "0") == "1"

LOG_LEVEL: str = getenv("ARBOR_LOG_LEVEL", "info")

LOG_REQUESTS: bool = getenv("ARBOR_LOG_REQUESTS", "1") == "1"

# Size of the chunks read when streaming files
CHUNK_SIZE: int = int(getenv("ARBOR_CHUNK_SIZE", 64_000))

SESSION_COOKIE: str = getenv("ARBOR_SESSION_COOKIE", "session.id")

DEFAULT_ENCODING: str = "utf8"

# EOF

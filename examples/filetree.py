"""
Static File Tree Example

Serves the current directory, with range requests, entity tags and
redirects for symbolic links.

Usage (with any ASGI server):
    uvicorn examples.filetree:application --port 8080

Test with:
    curl -i http://localhost:8080/README.md
    curl -i -H "Range: bytes=0-99" http://localhost:8080/README.md
"""

from arbor import Decorators, Error, FileTree, Log, asgi
from arbor.utils.logging import info

app = Decorators(
	[Log, Error],
	FileTree(".", redirectSymbolicLinks=True),
)

application = asgi(app)

info("Serving files from the current directory")

# EOF

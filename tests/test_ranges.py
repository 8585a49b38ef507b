"""
Unit tests for the `Range` header interpretation.
"""

import pytest

from arbor.http.ranges import ByteRange, interpretFirstRange, interpretRange


@pytest.mark.parametrize(
	"header,size,expected",
	[
		("bytes=0-0", 10, ByteRange(0, 1)),
		("bytes=1-2", 4, ByteRange(1, 3)),
		("bytes=5-", 10, ByteRange(5, 10)),
		("bytes=-3", 10, ByteRange(7, 10)),
		("  bytes = 1 - 2 ", 4, ByteRange(1, 3)),
		# Continuous ranges are merged
		("bytes=500-600,601-999", 10000, ByteRange(500, 1000)),
		("bytes=0-10,5-20", 100, ByteRange(0, 21)),
		("bytes=0-20,5-10", 100, ByteRange(0, 21)),
		# Merging stops at the first gap
		("bytes=0-0,-1", 10000, ByteRange(0, 1)),
		("bytes=0-1,3-4", 10, ByteRange(0, 2)),
		# ... or at the first invalid spec
		("bytes=0-1,-,2-3", 10, ByteRange(0, 2)),
	],
)
def test_interpret_first_range(header: str, size: int, expected: ByteRange):
	assert interpretFirstRange(header, size) == expected


@pytest.mark.parametrize(
	"header",
	["", "bytes=", "bytes=-", "items=0-1", "bytes=a-b", "bytes 0-1", "bytes=0-1;"],
)
def test_interpret_first_range_invalid(header: str):
	assert interpretFirstRange(header, 100) is None


def test_interpret_first_range_is_not_bounded():
	# Checking against the size is up to the caller
	assert interpretFirstRange("bytes=5-20", 10) == ByteRange(5, 21)
	assert interpretFirstRange("bytes=-20", 10) == ByteRange(-10, 10)


def test_interpret_range():
	assert interpretRange("2-5", 10) == ByteRange(2, 6)
	assert interpretRange("-", 10) is None
	assert interpretRange("x", 10) is None


def test_byte_range():
	selection = ByteRange(1, 3)
	assert selection.length == 2
	assert selection.contentRange(4) == "bytes 1-2/4"


# EOF

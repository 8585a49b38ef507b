"""
Unit tests for the `Accept*` headers matching.
"""

from arbor.http.negotiation import Preference, bestMatch, parsePreferences


def test_parse_preferences():
	assert parsePreferences("text/html;level=1, text/*;q=0.3, */*;Q=0.1") == [
		Preference("text/html", 1.0),
		Preference("text/*", 0.3),
		Preference("*/*", 0.1),
	]


def test_parse_preferences_clamps_quality():
	assert parsePreferences("a;q=2, b;q=-1, c;q=x") == [
		Preference("a", 1.0),
		Preference("b", 0.0),
		Preference("c", 0.0),
	]


def test_best_match_media_types():
	candidates = ["text/html", "application/json"]
	assert bestMatch(candidates, "application/json") == "application/json"
	assert bestMatch(candidates, "text/*;q=0.5, application/json;q=0.9") == (
		"application/json"
	)
	assert bestMatch(candidates, "text/*") == "text/html"
	assert bestMatch(candidates, "image/png") is None


def test_best_match_defaults_to_anything():
	assert bestMatch(["text/html", "application/json"], None) == "text/html"
	assert bestMatch(["application/json", "text/html"], "") == "application/json"
	assert bestMatch(["application/json", "text/html"], "*/*") == "application/json"


def test_best_match_excludes_zero_quality():
	assert bestMatch(["text/html"], "text/html;q=0, */*") is None
	assert bestMatch(["text/html", "text/plain"], "text/html;q=0, */*") == (
		"text/plain"
	)


def test_best_match_ties_go_to_first_candidate():
	assert bestMatch(["b", "a"], "a, b") == "b"


def test_best_match_languages():
	assert bestMatch(["en-GB", "fr"], "en") == "en-GB"
	assert bestMatch(["de", "fr"], "fr;q=0.5, *;q=0.1") == "fr"
	assert bestMatch(["de"], "fr") is None


def test_best_match_is_case_insensitive():
	assert bestMatch(["UTF-8"], "utf-8") == "UTF-8"


# EOF

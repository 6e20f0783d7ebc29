"""Tests for path parsing and operation resolution."""

import pytest

from s3bridge.routing import Operation, ParsedPath, parse_path, resolve_operation


class TestParsePath:
    """Tests for parse_path()."""

    def test_root_is_empty(self):
        """'/' names neither bucket nor key."""
        parsed = parse_path("/")
        assert parsed == ParsedPath(None, None)
        assert parsed.is_empty

    def test_empty_string_is_empty(self):
        assert parse_path("").is_empty

    def test_bucket_only(self):
        """A single segment is the bucket, with no key."""
        assert parse_path("/photos") == ParsedPath("photos", None)

    def test_bucket_trailing_slash(self):
        """A trailing slash does not create an empty key."""
        assert parse_path("/photos/") == ParsedPath("photos", None)

    def test_bucket_and_key(self):
        assert parse_path("/photos/cat.png") == ParsedPath("photos", "cat.png")

    def test_nested_key_is_rejoined(self):
        """Segments after the bucket are joined with '/'."""
        assert parse_path("/photos/2024/06/cat.png") == ParsedPath("photos", "2024/06/cat.png")

    def test_empty_segments_discarded(self):
        """Repeated slashes collapse: '//a//b//c' parses as '/a/b/c'."""
        assert parse_path("//photos//2024//cat.png/") == ParsedPath("photos", "2024/cat.png")

    def test_no_character_validation(self):
        """Unusual characters pass through untouched."""
        assert parse_path("/My_Bucket!/a b&c<d>.txt") == ParsedPath("My_Bucket!", "a b&c<d>.txt")

    def test_is_empty_false_with_bucket(self):
        assert not parse_path("/photos").is_empty


class TestResolveOperation:
    """Tests for resolve_operation()."""

    @pytest.mark.parametrize(
        "method, path, expected",
        [
            ("PUT", "/b/k", Operation.PUT),
            ("GET", "/b/k", Operation.GET),
            ("GET", "/b", Operation.LIST),
            ("DELETE", "/b/k", Operation.DELETE),
            ("put", "/b/k", Operation.PUT),
            ("PUT", "/b", Operation.INVALID),
            ("DELETE", "/b", Operation.INVALID),
            ("PATCH", "/b/k", Operation.INVALID),
            ("POST", "/b/k", Operation.INVALID),
            ("HEAD", "/b/k", Operation.INVALID),
            ("GET", "/", Operation.INVALID),
            ("PUT", "/", Operation.INVALID),
        ],
    )
    def test_dispatch_table(self, method, path, expected):
        assert resolve_operation(method, parse_path(path)) is expected

"""Tests for content-type lookup."""

from unittest.mock import patch

from s3bridge.mime import guess_content_type


class TestGuessContentType:
    def test_known_extension(self):
        assert guess_content_type("cat.png") == "image/png"

    def test_nested_key_uses_extension(self):
        assert guess_content_type("docs/2024/report.pdf") == "application/pdf"

    def test_unknown_extension_defaults_to_binary(self):
        assert guess_content_type("blob.zzzunknown") == "application/octet-stream"

    def test_no_extension_defaults_to_binary(self):
        assert guess_content_type("README") == "application/octet-stream"

    def test_parameters_are_truncated(self):
        """A compound value keeps only the primary type token."""
        with patch("s3bridge.mime.mimetypes.guess_type", return_value=("text/plain; charset=utf-8", None)):
            assert guess_content_type("notes.txt") == "text/plain"

"""Unit tests for content-type resolution."""

import pytest

from s3publish.uploader.content_type import DEFAULT_CONTENT_TYPE, content_type


class TestContentType:
    """Test content_type function."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("index.html", "text/html"),
            ("dist/css/site.css", "text/css"),
            ("logo.png", "image/png"),
            ("data/report.json", "application/json"),
        ],
    )
    def test_known_extensions(self, path, expected):
        """Test common web asset extensions resolve to their MIME type."""
        assert content_type(path) == expected

    def test_javascript(self):
        """Test .js resolves to a JavaScript type."""
        assert content_type("dist/app.js") in ("application/javascript", "text/javascript")

    def test_uppercase_extension_falls_back_to_lowercase(self):
        """Test INDEX.HTML resolves like index.html."""
        assert content_type("INDEX.HTML") == "text/html"

    def test_missing_extension_is_octet_stream(self):
        """Test files without an extension get the default type."""
        assert content_type("noext") == DEFAULT_CONTENT_TYPE
        assert content_type("dist/LICENSE") == "application/octet-stream"

    def test_unknown_extension_is_octet_stream(self):
        """Test unknown extensions get the default type."""
        assert content_type("file.unknownext") == "application/octet-stream"

    def test_only_final_extension_counts(self):
        """Test the type comes from the last extension."""
        assert content_type("archive.tar.unknownext") == DEFAULT_CONTENT_TYPE
        assert content_type("site.min.css") == "text/css"

    @pytest.mark.parametrize("path", ["", ".", "dir/", "a.b/c", "trailing."])
    def test_never_empty(self, path):
        """Test every input yields a non-empty type."""
        assert content_type(path)

"""Tests for the upload error hierarchy."""

from botocore.exceptions import ClientError

from s3publish.exceptions import (
    CompressionError,
    FileOpenError,
    GlobError,
    S3PublishError,
    UploadError,
)


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutObject")


class TestS3PublishError:
    """Test base error formatting."""

    def test_message_only(self):
        assert str(S3PublishError("failed")) == "failed"

    def test_message_with_hint(self):
        assert str(S3PublishError("failed", "try again")) == "failed\nHint: try again"

    def test_all_errors_share_base(self):
        """Test callers can catch every fatal error with one clause."""
        for cls in (GlobError, FileOpenError, CompressionError, UploadError):
            assert issubclass(cls, S3PublishError)


class TestGlobError:
    def test_reason_in_message(self):
        error = GlobError("dist/[", "unterminated character class")

        assert error.pattern == "dist/["
        assert "unterminated character class" in error.message
        assert error.original_error is None

    def test_original_error_in_message(self):
        cause = OSError("Input/output error")
        error = GlobError("dist/*", original_error=cause)

        assert error.original_error is cause
        assert "Input/output error" in error.message


class TestFileOpenError:
    def test_permission_hint(self):
        error = FileOpenError("dist/app.js", PermissionError("denied"))

        assert error.path == "dist/app.js"
        assert "permissions" in error.hint

    def test_no_hint_for_other_errors(self):
        error = FileOpenError("dist/app.js", FileNotFoundError("gone"))
        assert error.hint is None


class TestUploadError:
    def test_client_error_code_extracted(self):
        error = UploadError("dist/app.js", "site", "/dist/app.js", _client_error("AccessDenied"))

        assert error.error_code == "AccessDenied"
        assert "ACL" in error.hint
        assert "s3://site/dist/app.js" in error.message

    def test_credential_errors_hint(self):
        for code in ("InvalidAccessKeyId", "SignatureDoesNotMatch"):
            error = UploadError("a", "site", "/a", _client_error(code))
            assert "PLUGIN_ACCESS_KEY" in error.hint

    def test_redirect_hint(self):
        error = UploadError("a", "site", "/a", _client_error("PermanentRedirect"))
        assert "path-style" in error.hint

    def test_non_client_error(self):
        error = UploadError("a", "site", "/a", ConnectionResetError("reset"))

        assert error.error_code is None
        assert error.hint is None

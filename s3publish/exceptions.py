"""
Exceptions raised by an upload run.

Every fatal failure of a run is one of the classes below. They keep the
underlying exception on ``original_error`` (and as ``__cause__``) so callers
can inspect the SDK or OS error, and carry an optional hint that is appended
to the message when printed.
"""

from typing import Optional

from botocore.exceptions import ClientError


class S3PublishError(Exception):
    """Base exception for all s3publish errors."""

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class GlobError(S3PublishError):
    """Raised when a glob pattern is invalid or the filesystem walk fails."""

    def __init__(
        self,
        pattern: str,
        reason: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.pattern = pattern
        self.original_error = original_error

        detail = reason or str(original_error) or type(original_error).__name__
        super().__init__(
            f"Could not match files for pattern {pattern!r}: {detail}",
            "Patterns support *, ?, [...] and ** for recursive matching.",
        )


class FileOpenError(S3PublishError):
    """Raised when a matched file cannot be opened for reading."""

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        self.path = path
        self.original_error = original_error

        hint = None
        if isinstance(original_error, PermissionError):
            hint = "Check the file permissions of the build workspace."

        super().__init__(f"Problem opening file {path}: {original_error}", hint)


class CompressionError(S3PublishError):
    """Raised when a file cannot be gzip-compressed."""

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        self.path = path
        self.original_error = original_error
        super().__init__(f"Problem gzipping file {path}: {original_error}")


class UploadError(S3PublishError):
    """Raised when the object store rejects or fails a write."""

    def __init__(
        self,
        path: str,
        bucket: str,
        key: str,
        original_error: Optional[Exception] = None,
    ):
        self.path = path
        self.bucket = bucket
        self.key = key
        self.original_error = original_error
        self.error_code: Optional[str] = None

        if isinstance(original_error, ClientError):
            self.error_code = original_error.response.get("Error", {}).get("Code")

        super().__init__(
            f"Could not upload {path} to s3://{bucket}{key}: {original_error}",
            self._hint(),
        )

    def _hint(self) -> Optional[str]:
        if self.error_code in ("InvalidAccessKeyId", "SignatureDoesNotMatch"):
            return "Check the access key and secret key (PLUGIN_ACCESS_KEY / PLUGIN_SECRET_KEY)."
        if self.error_code == "NoSuchBucket":
            return f"The bucket '{self.bucket}' does not exist at this endpoint."
        if self.error_code == "AccessDenied":
            return "Check the bucket policy and that the key may set the requested ACL."
        if self.error_code == "PermanentRedirect":
            return "The bucket lives in another region, or the endpoint needs path-style addressing."
        return None

"""
S3 uploader module.

Matches local build artifacts with glob patterns and writes them to an
S3-compatible bucket with proper content types, optional gzip encoding and a
canned ACL.
"""

from .content_type import DEFAULT_CONTENT_TYPE, content_type
from .matcher import match_files
from .uploader import (
    VALID_ACLS,
    RunSummary,
    UploadConfig,
    UploadRequest,
    build_client,
    build_target_key,
    gzip_bytes,
    prepare_request,
    run,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "VALID_ACLS",
    "RunSummary",
    "UploadConfig",
    "UploadRequest",
    "build_client",
    "build_target_key",
    "content_type",
    "gzip_bytes",
    "match_files",
    "prepare_request",
    "run",
]

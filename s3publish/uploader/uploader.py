"""
S3 uploader implementation.

Walks the files matched by the source pattern and writes each one to an
S3-compatible bucket with a guessed content type, optionally gzip-compressed.
Uploads are sequential and the first open, compress or write error aborts
the run.

Example usage:
    >>> from s3publish.uploader import UploadConfig, run
    >>> config = UploadConfig(
    ...     bucket="my-site",
    ...     source="dist/**/*",
    ...     target="releases/1.2.0",
    ...     exclude=("dist/**/*.map",),
    ...     compress=True,
    ... )
    >>> summary = run(config)
    >>> print(f"Uploaded {len(summary.uploaded)} files")
"""

import gzip
import os
import posixpath
import stat
import time
import zlib
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union

import boto3
from botocore import UNSIGNED
from botocore.config import Config

from s3publish.exceptions import (
    CompressionError,
    FileOpenError,
    GlobError,
    UploadError,
)
from s3publish.uploader.content_type import content_type
from s3publish.uploader.matcher import match_files
from s3publish.utils.logging import get_logger, log_function_call
from s3publish.utils.metrics import UploadMetrics

# Module logger
logger = get_logger(__name__)

# Canned ACLs accepted by S3 and most S3-compatible stores
VALID_ACLS = [
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "aws-exec-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
]

DEFAULT_REGION = "us-east-1"
DEFAULT_ACL = "private"


@dataclass(frozen=True)
class UploadConfig:
    """
    Configuration for one upload run.

    Attributes:
        bucket: Destination bucket name
        source: Glob pattern selecting the files to upload
        target: Key prefix the matched paths are joined under
        exclude: Glob patterns selecting files to leave out
        endpoint: Endpoint URL for S3-compatible stores (empty for AWS)
        access_key: Static access key ID
        secret_key: Static secret access key (never shown in repr)
        region: Bucket region
        acl: Canned ACL applied to every object
        path_style: Put the bucket in the URL path instead of the hostname
        dry_run: Log what would be uploaded without writing anything
        compress: Gzip each file and upload with Content-Encoding: gzip
    """

    bucket: str
    source: str
    target: str = ""
    exclude: Tuple[str, ...] = ()
    endpoint: str = ""
    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    region: str = DEFAULT_REGION
    acl: str = DEFAULT_ACL
    path_style: bool = False
    dry_run: bool = False
    compress: bool = False


@dataclass
class UploadRequest:
    """
    A single object write, built fresh for every matched file.

    Attributes:
        path: Local file the object is read from
        bucket: Destination bucket
        key: Object key, always starting with "/"
        acl: Canned ACL
        content_type: MIME type sent as Content-Type
        body: Open file handle, or the gzip-compressed bytes
        content_encoding: "gzip" when the body is compressed
    """

    path: str
    bucket: str
    key: str
    acl: str
    content_type: str
    body: Union[BinaryIO, bytes]
    content_encoding: Optional[str] = None

    def to_put_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``client.put_object``."""
        kwargs: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self.key,
            "ACL": self.acl,
            "ContentType": self.content_type,
            "Body": self.body,
        }
        if self.content_encoding:
            kwargs["ContentEncoding"] = self.content_encoding
        return kwargs


@dataclass
class RunSummary:
    """
    Outcome of a completed run.

    Attributes:
        uploaded: Object keys written, in upload order
        skipped: Matched paths that were not files (directories, or paths
            that could not be stat'ed)
        dry_run: Object keys that would have been written
        bytes_uploaded: Total body bytes sent (compressed size when gzipping)
        duration_seconds: Wall-clock time of the run
    """

    uploaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    dry_run: List[str] = field(default_factory=list)
    bytes_uploaded: int = 0
    duration_seconds: float = 0.0


def build_client(config: UploadConfig):
    """
    Create the boto3 S3 client for a run.

    Only the static key pair from the config is used. With no keys at all
    requests are sent unsigned instead of falling back to ambient
    credentials. Plain ``http://`` endpoints disable TLS.
    """
    s3_options = {"addressing_style": "path" if config.path_style else "auto"}
    if config.access_key or config.secret_key:
        client_config = Config(s3=s3_options)
        credentials = {
            "aws_access_key_id": config.access_key,
            "aws_secret_access_key": config.secret_key,
        }
    else:
        client_config = Config(s3=s3_options, signature_version=UNSIGNED)
        credentials = {}

    client_kwargs: Dict[str, Any] = {
        "region_name": config.region,
        "use_ssl": not config.endpoint.startswith("http://"),
        "config": client_config,
    }
    if config.endpoint:
        client_kwargs["endpoint_url"] = config.endpoint

    return boto3.client("s3", **client_kwargs, **credentials)


def build_target_key(target: str, path: str) -> str:
    """
    Join a matched path under the target prefix and make it absolute.

    The joined path is cleaned (duplicate slashes, "." and ".." segments)
    and always starts with exactly one "/".

    Example:
        >>> build_target_key("bundle", "dist/app.js")
        '/bundle/dist/app.js'
        >>> build_target_key("/bundle/", "./dist/../app.js")
        '/bundle/app.js'
    """
    parts = [part.replace(os.sep, "/") for part in (target, path) if part]
    if not parts:
        return "/"

    key = posixpath.normpath("/".join(parts))
    if key == ".":
        key = ""
    return "/" + key.lstrip("/")


def gzip_bytes(fileobj: BinaryIO) -> bytes:
    """
    Read ``fileobj`` completely and return its gzip encoding.

    The header timestamp is fixed so identical input gives identical output.
    """
    return gzip.compress(fileobj.read(), mtime=0)


def prepare_request(
    config: UploadConfig,
    path: str,
    key: str,
    mime_type: str,
    fileobj: BinaryIO,
) -> UploadRequest:
    """
    Build the write request for an open file.

    Raises:
        CompressionError: If compression is enabled and gzipping fails
    """
    request = UploadRequest(
        path=path,
        bucket=config.bucket,
        key=key,
        acl=config.acl,
        content_type=mime_type,
        body=fileobj,
    )

    if config.compress:
        # Buffers the whole file in memory
        try:
            request.body = gzip_bytes(fileobj)
        except (OSError, zlib.error) as e:
            logger.error(
                "Problem gzipping file",
                extra={"error": str(e), "file": path},
            )
            raise CompressionError(path, e) from e
        request.content_encoding = "gzip"

    return request


def _open_source(path: str) -> BinaryIO:
    return open(path, "rb")


def _upload_one(
    client,
    config: UploadConfig,
    path: str,
    key: str,
    mime_type: str,
    file_size: int,
    metrics: UploadMetrics,
) -> int:
    """Open, optionally compress and write a single file; return bytes sent."""
    try:
        fileobj = _open_source(path)
    except OSError as e:
        logger.error(
            "Problem opening file",
            extra={"error": str(e), "file": path},
        )
        metrics.record_failure("open", e)
        raise FileOpenError(path, e) from e

    with fileobj:
        try:
            request = prepare_request(config, path, key, mime_type, fileobj)
        except CompressionError as e:
            metrics.record_failure("compress", e.original_error or e)
            raise

        try:
            with metrics.track_upload():
                client.put_object(**request.to_put_kwargs())
        except Exception as e:
            logger.error(
                "Could not upload file",
                extra={
                    "file": path,
                    "bucket": config.bucket,
                    "target": key,
                    "error": str(e),
                },
            )
            metrics.record_failure("upload", e)
            raise UploadError(path, config.bucket, key, e) from e

    if isinstance(request.body, bytes):
        return len(request.body)
    return file_size


@log_function_call
def run(
    config: UploadConfig,
    client=None,
    metrics: Optional[UploadMetrics] = None,
) -> RunSummary:
    """
    Upload every file matched by ``config.source`` to ``config.bucket``.

    Files are processed one at a time in match order. Paths that cannot be
    stat'ed and directories are skipped. In dry-run mode nothing is opened
    and nothing is written; the per-file log lines are still emitted.

    Args:
        config: Run configuration
        client: S3 client to use; built from the config when omitted
        metrics: Collectors to record into; a fresh set when omitted

    Returns:
        RunSummary describing what was uploaded and skipped

    Raises:
        GlobError: A pattern is invalid or the filesystem walk failed
        FileOpenError: A matched file could not be opened
        CompressionError: A matched file could not be gzipped
        UploadError: The object store rejected or failed a write
        ValueError: The client could not be built (for example a malformed
            endpoint URL)
    """
    if metrics is None:
        metrics = UploadMetrics()
    if client is None:
        client = build_client(config)

    start_time = time.time()
    summary = RunSummary()

    logger.info(
        "Attempting to upload",
        extra={
            "region": config.region,
            "endpoint": config.endpoint,
            "bucket": config.bucket,
        },
    )

    try:
        matches = match_files(config.source, config.exclude)
    except GlobError as e:
        logger.error("Could not match files", extra={"error": str(e)})
        metrics.record_failure("match", e.original_error or e)
        raise

    for match in matches:
        try:
            info = os.stat(match)
        except OSError as e:
            # Entry vanished or is a dangling link; not worth failing the run
            logger.debug(f"Skipping unreadable entry {match}: {e}")
            summary.skipped.append(match)
            metrics.record_skipped()
            continue

        if stat.S_ISDIR(info.st_mode):
            summary.skipped.append(match)
            metrics.record_skipped()
            continue

        target = build_target_key(config.target, match)
        mime_type = content_type(match)

        logger.info(
            f"Uploading file {match} to {target}",
            extra={
                "file": match,
                "bucket": config.bucket,
                "target": target,
                "content_type": mime_type,
            },
        )

        if config.dry_run:
            summary.dry_run.append(target)
            metrics.record_dry_run()
            continue

        sent = _upload_one(
            client, config, match, target, mime_type, info.st_size, metrics
        )
        summary.uploaded.append(target)
        summary.bytes_uploaded += sent
        metrics.record_upload_success(bytes_uploaded=sent)

    summary.duration_seconds = time.time() - start_time

    logger.info(
        f"Upload complete: {len(summary.uploaded)} uploaded, "
        f"{len(summary.dry_run)} dry-run, {len(summary.skipped)} skipped, "
        f"{summary.bytes_uploaded / (1024 * 1024):.2f}MB sent"
    )

    return summary

"""
Prometheus metrics for upload runs.

A pipeline step is a short-lived batch job, so metrics are collected in a
per-run registry and, when asked for, written in the node-exporter textfile
format at the end of the run instead of being served over HTTP.

Metrics Provided:
    - s3publish_files_total{status}: files seen, by outcome
      (uploaded, skipped, dry_run, failed)
    - s3publish_upload_bytes_total: bytes sent to the object store
    - s3publish_upload_duration_seconds: put_object latency
    - s3publish_upload_errors_total{stage, error_type}: fatal errors

Usage:
    >>> from s3publish.utils.metrics import UploadMetrics
    >>> metrics = UploadMetrics()
    >>> with metrics.track_upload():
    ...     client.put_object(...)
    >>> metrics.record_upload_success(bytes_uploaded=1024)
    >>> metrics.write_textfile("/var/lib/node_exporter/s3publish.prom")
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, write_to_textfile

from s3publish.utils.logging import get_logger

logger = get_logger(__name__)


class UploadMetrics:
    """
    Prometheus collectors for a single upload run.

    Each instance owns its registry (unless one is passed in), so several
    runs in one process never collide on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.files = Counter(
            name="s3publish_files_total",
            documentation="Files processed by the upload loop",
            labelnames=["status"],  # uploaded, skipped, dry_run, failed
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="s3publish_upload_bytes_total",
            documentation="Bytes sent to the object store",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="s3publish_upload_duration_seconds",
            documentation="Time spent in put_object",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
            registry=self.registry,
        )

        self.upload_errors = Counter(
            name="s3publish_upload_errors_total",
            documentation="Fatal errors that aborted a run",
            labelnames=["stage", "error_type"],  # stage: match, open, compress, upload
            registry=self.registry,
        )

    def track_upload(self):
        """
        Context manager timing a single write.

        Example:
            >>> with metrics.track_upload():
            ...     client.put_object(**kwargs)
        """
        return self.upload_duration.time()

    def record_upload_success(self, bytes_uploaded: int) -> None:
        """Record a completed write of ``bytes_uploaded`` bytes."""
        self.files.labels(status="uploaded").inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_skipped(self) -> None:
        self.files.labels(status="skipped").inc()

    def record_dry_run(self) -> None:
        self.files.labels(status="dry_run").inc()

    def record_failure(self, stage: str, error: BaseException) -> None:
        """
        Record the fatal error that aborted the run.

        Args:
            stage: Where the run failed (match, open, compress, upload)
            error: The underlying exception
        """
        if stage != "match":
            self.files.labels(status="failed").inc()
        self.upload_errors.labels(stage=stage, error_type=type(error).__name__).inc()

    def value(self, name: str, **labels: str) -> float:
        """Current value of a sample, 0.0 when it was never recorded."""
        sample = self.registry.get_sample_value(name, labels or None)
        return sample if sample is not None else 0.0

    def write_textfile(self, path: str) -> None:
        """
        Write all collectors in the Prometheus text format.

        The file is written atomically, as the node-exporter textfile
        collector expects.
        """
        write_to_textfile(path, self.registry)
        logger.info(f"Metrics written to {path}")

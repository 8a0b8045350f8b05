"""
s3publish

A build-pipeline step that publishes local build artifacts to an S3-compatible
object store (AWS S3, MinIO, Ceph, ...).

This package provides the pieces of a single upload run:
- uploader: glob matching, content-type resolution and the upload loop
- utils: logging, configuration loading and run metrics
- exceptions: error taxonomy for fatal upload failures

See scripts/upload.py for the command-line entry point.
"""

__version__ = "0.1.0"

# Package-level imports
from s3publish.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()

"""
Utility modules for s3publish.

This package provides shared utilities used by the uploader and the CLI:
- logging: Structured logging with entry/exit decorators
- config: Assembling an UploadConfig from environment and overrides
- config_loader: YAML settings file loading and validation
- metrics: Prometheus collectors for a run
"""

from s3publish.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]

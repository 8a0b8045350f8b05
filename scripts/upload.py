#!/usr/bin/env python3
"""
Publish build artifacts to an S3-compatible bucket.

CLI wrapper for the uploader module. Settings come from command-line flags,
PLUGIN_* environment variables (as set by CI pipeline plugins), an optional
.env file and an optional YAML settings file, in that order of precedence.

Usage:
    python scripts/upload.py --bucket my-site --source 'dist/**/*'
    python scripts/upload.py --source 'dist/**/*' --target releases/1.2.0 --compress
    python scripts/upload.py --config .s3publish.yaml --dry-run
    PLUGIN_BUCKET=my-site PLUGIN_SOURCE='dist/*' python scripts/upload.py
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from s3publish.exceptions import S3PublishError  # noqa: E402
from s3publish.uploader import VALID_ACLS, run  # noqa: E402
from s3publish.utils.config import config_from_env  # noqa: E402
from s3publish.utils.config_loader import (  # noqa: E402
    get_config_example,
    load_config,
    validate_config,
)
from s3publish.utils.logging import (  # noqa: E402
    get_logger,
    set_correlation_id,
    setup_logging,
)
from s3publish.utils.metrics import UploadMetrics  # noqa: E402

logger = get_logger(__name__)

BUILD_NUMBER_VARS = ("DRONE_BUILD_NUMBER", "CI_BUILD_NUMBER", "GITHUB_RUN_NUMBER")


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Publish build artifacts to an S3-compatible bucket",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload everything under dist/ to the bucket root
  %(prog)s --bucket my-site --source 'dist/**/*'

  # Upload under a versioned prefix, skipping source maps
  %(prog)s --source 'dist/**/*' --target releases/1.2.0 --exclude 'dist/**/*.map'

  # MinIO with path-style addressing and gzip encoding
  %(prog)s --endpoint http://minio:9000 --path-style --compress --source 'dist/*'

  # Show what would be uploaded
  %(prog)s --config .s3publish.yaml --dry-run

Credentials are read from PLUGIN_ACCESS_KEY / PLUGIN_SECRET_KEY
(or AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY), never from flags.
        """,
    )

    parser.add_argument("--endpoint", help="Endpoint URL for S3-compatible stores")
    parser.add_argument("-b", "--bucket", help="Destination bucket")
    parser.add_argument("-r", "--region", help="Bucket region (default: us-east-1)")
    parser.add_argument(
        "--acl",
        help=f"Canned ACL for uploaded objects (default: private; one of {', '.join(VALID_ACLS)})",
    )
    parser.add_argument("-s", "--source", help="Glob pattern of files to upload")
    parser.add_argument("-t", "--target", help="Key prefix to upload under")
    parser.add_argument(
        "-e",
        "--exclude",
        action="append",
        help="Glob pattern of files to skip (can specify multiple times)",
    )
    parser.add_argument(
        "--path-style",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use path-style addressing (needed for MinIO)",
    )
    parser.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Log what would be uploaded without uploading",
    )
    parser.add_argument(
        "--compress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Gzip files and upload with Content-Encoding: gzip",
    )
    parser.add_argument("-c", "--config", help="YAML settings file")
    parser.add_argument(
        "--print-config-example",
        action="store_true",
        help="Print an example YAML settings file and exit",
    )
    parser.add_argument("--env-file", help="Load environment variables from this file")
    parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics for the run to this file",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log output format (default: LOG_FORMAT or text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def collect_overrides(args) -> dict:
    """Settings given on the command line, without unset flags."""
    overrides = {
        "endpoint": args.endpoint,
        "bucket": args.bucket,
        "region": args.region,
        "acl": args.acl,
        "source": args.source,
        "target": args.target,
        "exclude": args.exclude,
        "path_style": args.path_style,
        "dry_run": args.dry_run,
        "compress": args.compress,
    }
    return {key: value for key, value in overrides.items() if value is not None}


def _set_build_correlation_id() -> None:
    for name in BUILD_NUMBER_VARS:
        build = os.getenv(name)
        if build:
            set_correlation_id(f"build-{build}")
            return


def main(argv=None):
    """Main entry point for upload CLI."""
    args = parse_args(argv)

    if args.print_config_example:
        print(get_config_example(), end="")
        return 0

    setup_logging(
        level="DEBUG" if args.verbose else "INFO",
        log_format=args.log_format,
    )
    _set_build_correlation_id()

    file_settings = {}
    if args.config:
        try:
            file_settings = load_config(args.config)
        except Exception as e:
            print(f"❌ Could not read settings file: {e}")
            return 1

        errors = validate_config(file_settings)
        if errors:
            print(f"❌ Invalid settings file {args.config}:")
            for error in errors:
                print(f"  • {error}")
            return 1

    try:
        config = config_from_env(
            overrides=collect_overrides(args),
            file_settings=file_settings,
            env_file=args.env_file,
        )
    except (ValueError, FileNotFoundError) as e:
        print(f"❌ Configuration error: {e}")
        print("\nRequired settings (flag or environment variable):")
        print("  - --bucket / PLUGIN_BUCKET")
        print("  - --source / PLUGIN_SOURCE")
        return 1

    if config.acl not in VALID_ACLS:
        logger.warning(f"ACL '{config.acl}' is not a standard canned ACL: {VALID_ACLS}")

    mode = " (dry run)" if config.dry_run else ""
    print(f"📤 Uploading {config.source} to s3://{config.bucket}/{config.target.lstrip('/')}{mode}")
    if config.endpoint:
        print(f"   Endpoint: {config.endpoint}")
    if config.exclude:
        print(f"   Excluding: {', '.join(config.exclude)}")
    print()

    metrics = UploadMetrics()
    try:
        summary = run(config, metrics=metrics)

    except KeyboardInterrupt:
        print("\n⚠️  Upload cancelled by user")
        return 130

    except S3PublishError as e:
        print(f"❌ Upload failed: {e}")
        return 1

    except ValueError as e:
        # botocore rejects malformed endpoint URLs while building the client
        print(f"❌ Configuration error: {e}")
        return 1

    finally:
        if args.metrics_file:
            try:
                metrics.write_textfile(args.metrics_file)
            except OSError as e:
                logger.error(f"Could not write metrics file: {e}")

    print("📊 Upload Summary:")
    if config.dry_run:
        print(f"  🔎 Would upload: {len(summary.dry_run)}")
    else:
        print(f"  ✅ Uploaded: {len(summary.uploaded)}")
        print(f"  📦 Total size: {summary.bytes_uploaded:,} bytes")
    print(f"  ⏭️  Skipped: {len(summary.skipped)}")
    print(f"  ⏱️  Duration: {summary.duration_seconds:.2f}s")

    if not summary.uploaded and not summary.dry_run:
        logger.warning(f"No files matched {config.source}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Integration tests for complete upload runs.

These tests wire configuration loading, glob matching, content-type
resolution and the upload loop together against a real build tree:
- Environment-configured publish of a bundle
- Compression toggling across a run
- Abort-on-first-failure behaviour
"""

import gzip
from pathlib import Path
from unittest.mock import patch

import pytest

import s3publish.uploader.uploader as uploader_module
from s3publish.exceptions import FileOpenError
from s3publish.uploader import run
from s3publish.utils.config import config_from_env
from s3publish.utils.metrics import UploadMetrics


@pytest.fixture
def bundle_dir(tmp_path: Path, monkeypatch) -> Path:
    """Create a build output with a bundle and its source map."""
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "app.js").write_bytes(b"(function(){console.log('app')})();\n")
    (dist / "app.js.map").write_bytes(b'{"version":3,"sources":["app.ts"]}\n')
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_publish_bundle_without_source_maps(bundle_dir: Path, s3_client):
    """Test the bundle is uploaded and the excluded source map is not."""
    config = config_from_env(
        environ={
            "PLUGIN_BUCKET": "assets",
            "PLUGIN_SOURCE": "dist/*",
            "PLUGIN_EXCLUDE": "dist/app.js.map",
            "PLUGIN_TARGET": "bundle",
            "PLUGIN_COMPRESS": "false",
            "PLUGIN_DRY_RUN": "false",
        }
    )

    summary = run(config, client=s3_client)

    assert s3_client.put_object.call_count == 1
    kwargs = s3_client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "assets"
    assert kwargs["Key"] == "/bundle/dist/app.js"
    assert kwargs["ContentType"] in ("application/javascript", "text/javascript")
    assert "ContentEncoding" not in kwargs
    assert s3_client.uploaded["/bundle/dist/app.js"] == (
        bundle_dir / "dist" / "app.js"
    ).read_bytes()
    assert summary.uploaded == ["/bundle/dist/app.js"]


def test_publish_compressed_bundle(bundle_dir: Path, s3_client):
    """Test every uploaded body is the gzip of its file."""
    config = config_from_env(
        environ={
            "PLUGIN_BUCKET": "assets",
            "PLUGIN_SOURCE": "dist/*",
            "PLUGIN_COMPRESS": "true",
            "PLUGIN_ACL": "public-read",
        }
    )

    run(config, client=s3_client)

    assert sorted(s3_client.uploaded) == ["/dist/app.js", "/dist/app.js.map"]
    for call in s3_client.put_object.call_args_list:
        assert call.kwargs["ContentEncoding"] == "gzip"
        assert call.kwargs["ACL"] == "public-read"
    for key, body in s3_client.uploaded.items():
        local = bundle_dir / key.lstrip("/")
        assert gzip.decompress(body) == local.read_bytes()


def test_second_file_open_failure_keeps_first_upload(bundle_dir: Path, s3_client):
    """Test the run stops at the failing file and earlier writes stand."""
    (bundle_dir / "dist" / "vendor.js").write_bytes(b"/* vendor */\n")
    real_open = uploader_module._open_source

    def flaky_open(path):
        if path.endswith("app.js.map"):
            raise PermissionError(13, "Permission denied", path)
        return real_open(path)

    config = config_from_env(
        environ={"PLUGIN_BUCKET": "assets", "PLUGIN_SOURCE": "dist/*"}
    )
    metrics = UploadMetrics()

    with patch.object(uploader_module, "_open_source", side_effect=flaky_open):
        with pytest.raises(FileOpenError):
            run(config, client=s3_client, metrics=metrics)

    # dist/vendor.js sorts after the failing file and is never reached
    assert list(s3_client.uploaded) == ["/dist/app.js"]
    assert metrics.value("s3publish_files_total", status="uploaded") == 1
    assert metrics.value("s3publish_files_total", status="failed") == 1
    assert metrics.value(
        "s3publish_upload_errors_total", stage="open", error_type="PermissionError"
    ) == 1

"""Pytest configuration."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Build workspace with a small dist/ tree; cwd is the workspace root."""
    dist = tmp_path / "dist"
    (dist / "css").mkdir(parents=True)
    (dist / "app.js").write_text("console.log('hello');\n")
    (dist / "app.js.map").write_text('{"version": 3}\n')
    (dist / "index.html").write_text("<html><body>hello</body></html>\n")
    (dist / "css" / "site.css").write_text("body { margin: 0; }\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def s3_client():
    """
    Stand-in for a boto3 S3 client.

    Records the bytes of every put_object body under its key in
    ``client.uploaded``, reading file handles at call time.
    """
    client = MagicMock()
    client.uploaded = {}

    def put_object(**kwargs):
        body = kwargs["Body"]
        data = body if isinstance(body, bytes) else body.read()
        client.uploaded[kwargs["Key"]] = data
        return {"ETag": '"d41d8cd98f00b204e9800998ecf8427e"'}

    client.put_object.side_effect = put_object
    return client

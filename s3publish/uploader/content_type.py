"""
Content-type resolution for uploaded objects.

S3 stores whatever Content-Type the writer sends and defaults to
binary/octet-stream, which breaks browsers loading published assets, so every
upload carries a type guessed from the file extension.
"""

import mimetypes
import os

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type(path: str) -> str:
    """
    Return the MIME type for ``path`` based on its extension.

    The extension is looked up as-is first, then lower-cased. Unknown or
    missing extensions resolve to ``application/octet-stream``.

    Example:
        >>> content_type("dist/index.html")
        'text/html'
        >>> content_type("LICENSE")
        'application/octet-stream'
    """
    ext = os.path.splitext(path)[1]
    if not ext:
        return DEFAULT_CONTENT_TYPE

    if not mimetypes.inited:
        mimetypes.init()

    typ = mimetypes.types_map.get(ext) or mimetypes.types_map.get(ext.lower())
    return typ or DEFAULT_CONTENT_TYPE

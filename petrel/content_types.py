"""
petrel/content_types.py — File extension to MIME type lookup.
"""

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    "bmp":  "image/bmp",
    "css":  "text/css",
    "csv":  "text/csv",
    "gif":  "image/gif",
    "htm":  "text/html",
    "html": "text/html",
    "ico":  "image/vnd.microsoft.icon",
    "jpg":  "image/jpeg",
    "jpeg": "image/jpeg",
    "js":   "text/javascript",
    "json": "application/json",
    "png":  "image/png",
    "pdf":  "application/pdf",
    "php":  "application/x-httpd-php",
    "svg":  "image/svg+xml",
    "tif":  "image/tiff",
    "tiff": "image/tiff",
    "txt":  "text/plain",
}


def get_file_extension(path: str) -> str:
    """
    Extension of the last path segment, or "" when that segment has no dot.
    Only the last segment is inspected so "a.dir/README" has no extension.
    """
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def content_type_for(path: str) -> str:
    """Content-Type for *path*; unknown and missing extensions are octet-stream."""
    return CONTENT_TYPES.get(get_file_extension(path), DEFAULT_CONTENT_TYPE)

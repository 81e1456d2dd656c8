"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps file extensions to the value of the Content-Type header the static
file handler sends with each file.

    index.html   →  text/html; charset=utf-8
    app.js       →  text/javascript; charset=utf-8
    logo.png     →  image/png
    blob.xyz     →  application/octet-stream     (unknown: treat as binary)

Text types get a charset parameter so browsers do not have to guess the
encoding; binary types never do.

=============================================================================
"""

from pathlib import Path
from typing import Union


# Lowercase extension (with dot) → MIME type
MIME_TYPES = {
    # Documents and text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".pdf": "application/pdf",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # Media
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # Archives and other data
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".wasm": "application/wasm",
    ".map": "application/json",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

# Non-text/* types whose content is still text
_TEXTUAL_TYPES = frozenset({
    "application/json",
    "application/xml",
    "image/svg+xml",
})


def get_mime_type(path: Union[str, Path]) -> str:
    """
    Look up the MIME type for a file name by extension.

        >>> get_mime_type("/www/Logo.PNG")
        'image/png'
        >>> get_mime_type("unknown.xyz")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def is_text_type(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXTUAL_TYPES


def get_content_type(path: Union[str, Path], charset: str = "utf-8") -> str:
    """
    Full Content-Type header value for a file.

        >>> get_content_type("page.html")
        'text/html; charset=utf-8'
        >>> get_content_type("image.png")
        'image/png'
    """
    mime_type = get_mime_type(path)
    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"
    return mime_type

"""Content-type lookup for downloaded objects."""

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(filename: str) -> str:
    """Guess a bare MIME type from a filename's extension.

    Parameters such as ``; charset=utf-8`` are stripped so only the
    primary type token is returned.

    Args:
        filename: The object key; only its extension is consulted.

    Returns:
        The MIME type, or ``application/octet-stream`` if unknown.
    """
    content_type = mimetypes.guess_type(filename, strict=False)[0]
    if not content_type:
        return DEFAULT_CONTENT_TYPE
    return content_type.split(";", 1)[0].strip() or DEFAULT_CONTENT_TYPE

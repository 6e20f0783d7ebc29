"""S3 XML response rendering helpers for s3bridge."""

from collections.abc import Iterable
from xml.sax.saxutils import escape as _sax_escape

from fastapi.responses import Response

from s3bridge.metadata.models import FileMapping

S3_XMLNS = "http://s3.amazonaws.com/doc/2006-03-01/"

# Pagination is not implemented; every listing is complete.
MAX_KEYS = 1000


def _escape_xml(value: str) -> str:
    """Escape special XML characters in a string value.

    Args:
        value: The raw string to escape.

    Returns:
        The XML-safe escaped string.
    """
    return _sax_escape(str(value))


def xml_response(body: str, status: int = 200) -> Response:
    """Wrap an XML body string in a FastAPI Response with correct content type.

    Args:
        body: The XML body string.
        status: HTTP status code.

    Returns:
        A FastAPI Response with media_type application/xml.
    """
    return Response(
        content=body,
        status_code=status,
        media_type="application/xml",
    )


def render_list_bucket_result(name: str, contents: Iterable[FileMapping]) -> str:
    """Render an S3 ListBucketResult XML document.

    Prefix and Marker are always empty, MaxKeys is fixed and IsTruncated is
    always false. Entries appear in the order given.

    Args:
        name: Bucket name.
        contents: The mapping records to list.

    Returns:
        An XML string for ListBucketResult.
    """
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<ListBucketResult xmlns="{S3_XMLNS}">',
        f"<Name>{_escape_xml(name)}</Name>",
        "<Prefix></Prefix>",
        "<Marker></Marker>",
        f"<MaxKeys>{MAX_KEYS}</MaxKeys>",
        "<IsTruncated>false</IsTruncated>",
    ]

    for record in contents:
        parts.append("<Contents>")
        parts.append(f"<Key>{_escape_xml(record.filename)}</Key>")
        parts.append(f"<LastModified>{_escape_xml(record.created_at)}</LastModified>")
        parts.append(f"<Size>{record.size or 0}</Size>")
        parts.append("<StorageClass>STANDARD</StorageClass>")
        parts.append("</Contents>")

    parts.append("</ListBucketResult>")
    return "\n".join(parts)

"""Request path parsing and operation dispatch for s3bridge.

Both functions here are pure: they see only the method and the raw path,
and never touch a backend.
"""

import enum
from typing import NamedTuple


class ParsedPath(NamedTuple):
    """A request path split into bucket and key.

    Attributes:
        bucket: The first non-empty path segment, or None.
        key: The remaining segments joined with ``/``, or None when the
            path has at most one segment.
    """

    bucket: str | None
    key: str | None

    @property
    def is_empty(self) -> bool:
        """True when the path names neither a bucket nor a key."""
        return self.bucket is None and self.key is None


class Operation(enum.Enum):
    """The operation a request resolves to."""

    PUT = "PutObject"
    GET = "GetObject"
    LIST = "ListObjects"
    DELETE = "DeleteObject"
    INVALID = "Invalid"


# (method, has_bucket, has_key) -> operation
_DISPATCH_TABLE: dict[tuple[str, bool, bool], Operation] = {
    ("PUT", True, True): Operation.PUT,
    ("GET", True, True): Operation.GET,
    ("GET", True, False): Operation.LIST,
    ("DELETE", True, True): Operation.DELETE,
}


def parse_path(path: str) -> ParsedPath:
    """Split a raw URL path into ``(bucket, key)``.

    Empty segments are discarded, so ``//a//b/`` parses the same as
    ``/a/b``. Bucket and key characters are passed through unvalidated.

    Args:
        path: The request path, e.g. ``/photos/2024/cat.png``.

    Returns:
        A ParsedPath; ``/photos/2024/cat.png`` gives
        ``("photos", "2024/cat.png")``.
    """
    parts = [part for part in path.split("/") if part]
    bucket = parts[0] if parts else None
    key = "/".join(parts[1:]) if len(parts) > 1 else None
    return ParsedPath(bucket, key)


def resolve_operation(method: str, parsed: ParsedPath) -> Operation:
    """Map an HTTP method and parsed path to an Operation.

    Args:
        method: The HTTP method (case-insensitive).
        parsed: The result of ``parse_path``.

    Returns:
        The matching Operation, or ``Operation.INVALID``.
    """
    shape = (method.upper(), parsed.bucket is not None, parsed.key is not None)
    return _DISPATCH_TABLE.get(shape, Operation.INVALID)

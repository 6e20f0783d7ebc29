"""Error definitions for s3bridge.

Two families live here: ``GatewayError`` subclasses carry an HTTP status and
a plain-text body and are rendered directly by the server, while
``StoreError`` subclasses are raised by the object store and metadata index
backends and surface to clients as ``InternalError``.
"""


class GatewayError(Exception):
    """An error with a client-facing message and HTTP status.

    Attributes:
        message: The plain-text response body.
        http_status: The HTTP status code to return.
    """

    def __init__(self, message: str, http_status: int = 400) -> None:
        """Initialize the gateway error.

        Args:
            message: Response body text.
            http_status: HTTP status code (default 400).
        """
        super().__init__(message)
        self.message = message
        self.http_status = http_status


# -- Client-facing errors -----------------------------------------------------


class MissingPath(GatewayError):
    """The request path names neither a bucket nor a key."""

    def __init__(self) -> None:
        super().__init__(
            "Error: Missing bucket or filename in path. Usage: /bucket or /bucket/file",
            http_status=400,
        )


class InvalidRequest(GatewayError):
    """The method and path shape do not match any operation."""

    def __init__(self, message: str = "Invalid Request") -> None:
        super().__init__(message, http_status=400)


class NoSuchKey(GatewayError):
    """No mapping exists for the requested key (download)."""

    def __init__(self) -> None:
        super().__init__("Not Found", http_status=404)


class NoSuchMapping(GatewayError):
    """No mapping exists for the requested bucket and key (delete)."""

    def __init__(self) -> None:
        super().__init__("File not found in mapping", http_status=404)


class InternalError(GatewayError):
    """A backend call failed while an operation was running."""

    def __init__(self, message: str = "") -> None:
        super().__init__(f"Internal Error: {message}", http_status=500)


# -- Backend errors -----------------------------------------------------------


class StoreError(Exception):
    """Base class for errors raised by a storage or metadata backend."""


class ObjectStoreError(StoreError):
    """The object store could not complete a request."""


class ObjectNotFoundError(ObjectStoreError):
    """No object is stored under the requested object id."""

    def __init__(self, object_id: str) -> None:
        super().__init__(f"Object not found: {object_id}")
        self.object_id = object_id


class MetadataIndexError(StoreError):
    """The metadata index could not complete a request."""

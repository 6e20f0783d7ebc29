"""Bucket-level request handlers for s3bridge.

Buckets have no lifecycle of their own here; a bucket is just the label
recorded on each mapping, so the only bucket operation is listing.
"""

import logging

from fastapi import FastAPI, Request, Response

from s3bridge.xml_utils import render_list_bucket_result, xml_response

logger = logging.getLogger(__name__)


class BucketHandler:
    """Handles bucket listing.

    Attributes:
        app: The parent FastAPI application.
    """

    def __init__(self, app: FastAPI) -> None:
        self.app = app

    @property
    def metadata(self):
        """Shortcut to the metadata index on app.state."""
        return self.app.state.metadata

    async def list_objects(self, request: Request, bucket: str) -> Response:
        """List every mapping recorded under a bucket label.

        Implements: GET /{bucket}

        Entries appear in the order the metadata index returns them. An
        unknown bucket lists zero entries rather than failing.

        Args:
            request: The incoming HTTP request.
            bucket: The bucket name from the URL path.

        Returns:
            200 with a ListBucketResult XML document.
        """
        mappings = await self.metadata.query(bucket_name=bucket)
        logger.debug("Listing %s: %d entries", bucket, len(mappings))
        return xml_response(render_list_bucket_result(bucket, mappings))

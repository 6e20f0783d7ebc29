"""Data model types for s3bridge metadata.

A ``FileMapping`` binds a logical filename (and its bucket label) to the
opaque object id the object store issued for its bytes.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FileMapping:
    """A metadata record tying a logical key to stored bytes.

    Attributes:
        id: Identifier of the record, assigned by the metadata index.
        filename: The logical key. May contain ``/`` separators.
        object_id: Identifier issued by the object store at upload time.
        bucket_name: The bucket label the key was uploaded under.
        size: Byte length recorded at upload time.
        created_at: ISO 8601 creation timestamp, assigned by the index.
    """

    id: str
    filename: str
    object_id: str
    bucket_name: str
    size: int = 0
    created_at: str = ""

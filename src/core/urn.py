"""Model reference (URN) codec.

APS addresses derivatives by the base64 form of an OSS object id. We use
the URL-safe alphabet without padding so a reference can sit in a path
segment as-is.
"""

import base64
import binascii
import re

from src.exceptions import InvalidReferenceError

_URN_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def encode(storage_id: str) -> str:
    """Encode an OSS object id into a viewer-friendly model reference."""
    raw = base64.urlsafe_b64encode(storage_id.encode("utf-8")).decode("ascii")
    return raw.rstrip("=")


def decode(reference: str) -> str:
    """Decode a model reference back to the OSS object id.

    Raises:
        InvalidReferenceError: if the reference is not a valid encoding
    """
    if not reference:
        raise InvalidReferenceError(reference, "empty reference")
    if not _URN_RE.match(reference):
        raise InvalidReferenceError(reference, "characters outside the URL-safe alphabet")
    # One leftover character can never come out of a base64 encoder
    if len(reference) % 4 == 1:
        raise InvalidReferenceError(reference, "impossible length")

    padded = reference + "=" * (-len(reference) % 4)
    try:
        data = base64.urlsafe_b64decode(padded)
        storage_id = data.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidReferenceError(reference, str(e)) from e

    # Reject non-canonical encodings (stray bits in the final character)
    if encode(storage_id) != reference:
        raise InvalidReferenceError(reference, "non-canonical encoding")
    return storage_id


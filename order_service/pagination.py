"""
Page token helpers

A page token is the decimal string of the row offset where the next page
starts. Clients treat it as opaque.
"""
from typing import Optional

# Offsets must fit a signed 64-bit column even after a page is added
MAX_OFFSET = 2 ** 62


def encode_page_token(offset: int) -> str:
    """Encode an offset as a page token"""
    return str(offset)


def decode_page_token(token: Optional[str]) -> int:
    """
    Decode a page token into an offset

    Missing, malformed, non-positive or out-of-range tokens restart from the
    beginning instead of failing the request.
    """
    if not token:
        return 0
    try:
        offset = int(token)
    except (TypeError, ValueError):
        return 0
    if offset <= 0 or offset > MAX_OFFSET:
        return 0
    return offset

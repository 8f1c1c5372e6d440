"""
Byte-level helpers: matching, line splitting and collection.

Chunks and lines are plain buffers (bytes, bytearray or memoryview); results are
always returned as immutable bytes.
"""

from typing import Iterable, Iterator, Union

Buffer = Union[bytes, bytearray, memoryview]

CRLF = b"\r\n"


def bytes_equal(left: Buffer, right: Buffer) -> bool:
    """
    Compare two byte buffers for equality.

    Works on any slice offset; memoryview comparison falls through to memcmp.

    Args:
        left: First buffer
        right: Second buffer

    Returns:
        True if both buffers have the same length and the same bytes
    """
    if len(left) != len(right):
        return False
    return memoryview(left).cast("B") == memoryview(right).cast("B")


def index_of(haystack: Buffer, needle: Buffer, start: int = 0) -> int:
    """
    Find the first occurrence of needle in haystack.

    Args:
        haystack: Buffer to search
        needle: Byte sequence to look for
        start: Offset to start searching from

    Returns:
        Index of the first match, or -1 if not found
    """
    if isinstance(haystack, memoryview):
        haystack = haystack.tobytes()
    return haystack.find(needle, start)


def split_stream(chunks: Iterable[Buffer], delimiter: bytes = CRLF) -> Iterator[bytes]:
    """
    Split a stream of byte chunks on a delimiter.

    Chunks may have any size and the delimiter may straddle two chunks. After the
    source is exhausted the remaining bytes are yielded once, even when empty.

    Args:
        chunks: Iterable of byte chunks, pulled lazily
        delimiter: Separator between segments (default CRLF)

    Yields:
        Segments between delimiters, without the delimiter

    Raises:
        ValueError: If delimiter is empty
    """
    if not delimiter:
        raise ValueError("split delimiter must not be empty")

    pending = bytearray()
    for chunk in chunks:
        # Re-scan the tail of the previous buffer in case the delimiter spans chunks
        search_from = max(0, len(pending) - len(delimiter) + 1)
        pending.extend(chunk)

        start = 0
        while (found := index_of(pending, delimiter, max(start, search_from))) != -1:
            yield bytes(pending[start:found])
            start = found + len(delimiter)
        if start:
            del pending[:start]

    yield bytes(pending)


def collect(chunks: Iterable[Buffer]) -> bytes:
    """
    Concatenate an iterable of byte chunks into one buffer.

    Args:
        chunks: Byte chunks

    Returns:
        All chunks joined in order
    """
    return b"".join(chunks)

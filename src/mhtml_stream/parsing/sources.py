"""
Chunk sources for feeding the parser from files and file-like objects.
"""

from pathlib import Path
from typing import BinaryIO, Iterator, Union

from ..config import settings


def iter_stream_chunks(stream: BinaryIO, chunk_size: int = 0) -> Iterator[bytes]:
    """
    Read a binary file-like object in chunks.

    Args:
        stream: Object with a ``read(size)`` method returning bytes
        chunk_size: Bytes per read, defaults to settings.read_chunk_size

    Yields:
        Non-empty byte chunks until end of stream
    """
    size = chunk_size or settings.read_chunk_size
    while chunk := stream.read(size):
        yield chunk


def iter_file_chunks(path: Union[str, Path], chunk_size: int = 0) -> Iterator[bytes]:
    """
    Read a file in chunks. The file is opened on first pull and closed when the
    generator is exhausted or closed.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    with open(path, "rb") as f:
        yield from iter_stream_chunks(f, chunk_size)

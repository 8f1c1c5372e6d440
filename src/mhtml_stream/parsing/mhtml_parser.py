"""
Streaming MHTML parser.

Turns an iterable of byte chunks into MhtmlPart objects, one per multipart part,
pulling only as many chunks as the current part needs. The first header block
(the archive envelope) is yielded as a part too, with whatever text precedes the
first boundary as its content.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional

import structlog

from ..errors import StructuralError
from .boundary import BoundaryState, resolve_boundary
from .byte_utils import CRLF, Buffer, bytes_equal, collect, split_stream
from .decoders import DEFAULT_ENCODING, Decoder, build_decoder_registry, select_decoder
from .headers import MhtmlHeaders, parse_headers

logger = structlog.get_logger(__name__)


class ParserPhase(str, Enum):
    """Phases of the part assembler."""

    EXPECT_HEADERS = "expect_headers"
    EXPECT_CONTENT = "expect_content"
    DONE = "done"


@dataclass
class MhtmlPart:
    """
    A file that was encoded in MHTML format.

    Attributes:
        headers: Decoded headers of the part (frozen)
        content: Decoded body bytes, without delimiters or boundary lines
    """

    headers: MhtmlHeaders
    content: bytes

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    @property
    def content_location(self) -> Optional[str]:
        return self.headers.get("Content-Location")

    @property
    def transfer_encoding(self) -> str:
        encoding = self.headers.get("Content-Transfer-Encoding")
        return DEFAULT_ENCODING if encoding is None else encoding


@dataclass
class AssemblerState:
    """State threaded through each step of the part assembler."""

    phase: ParserPhase = ParserPhase.EXPECT_HEADERS
    bounds: Optional[BoundaryState] = None
    parts_parsed: int = 0


def _content_lines(lines: Iterator[bytes], state: AssemblerState) -> Iterator[bytes]:
    """
    Yield body lines until the next boundary or the terminus.

    The marker line is consumed but never yielded. Sets the next phase on ``state``.

    Raises:
        StructuralError: If the lines run out before a boundary or terminus
    """
    bounds = state.bounds
    for line in lines:
        if bytes_equal(line, bounds.boundary):
            state.phase = ParserPhase.EXPECT_HEADERS
            return
        if bytes_equal(line, bounds.terminus):
            state.phase = ParserPhase.DONE
            return
        yield line
    raise StructuralError(
        "stream didn't end with the appropriate termination boundary: "
        f"{bounds.terminus.decode('utf-8', errors='replace')}"
    )


def parse_mhtml(
    chunks: Iterable[Buffer],
    decoder_overrides: Optional[Mapping[str, Decoder]] = None,
    delimiter: bytes = CRLF,
) -> Iterator[MhtmlPart]:
    """
    Parse a stream of bytes into MHTML parts.

    ``decoder_overrides`` can replace the default decoders or add a decoder for a
    Content-Transfer-Encoding that isn't handled.

    Args:
        chunks: Byte chunks of the archive, of any size
        decoder_overrides: Encoding name to decoder mapping merged over the defaults
        delimiter: Line delimiter of the archive

    Yields:
        MhtmlPart for each header block, starting with the archive envelope

    Raises:
        StructuralError: If the stream layout is broken
        EncodingError: If a part uses an unknown or unsupported encoding
        DecodeError: If encoded headers or content are malformed
    """
    decoders = build_decoder_registry(decoder_overrides)
    lines = split_stream(chunks, delimiter)
    state = AssemblerState()

    while state.phase is not ParserPhase.DONE:
        headers = parse_headers(lines)
        if state.bounds is None:
            state.bounds = resolve_boundary(headers)
            logger.debug(
                "boundary_resolved",
                boundary=state.bounds.boundary.decode("utf-8", errors="replace"),
            )

        decode = select_decoder(headers, decoders)
        state.phase = ParserPhase.EXPECT_CONTENT
        body = _content_lines(lines, state)
        content = collect(decode(body))
        # Lines a decoder left unread still belong to this part
        for _ in body:
            pass

        headers.freeze()
        state.parts_parsed += 1
        logger.debug(
            "part_parsed",
            index=state.parts_parsed - 1,
            content_type=headers.get("Content-Type"),
            size_bytes=len(content),
        )
        yield MhtmlPart(headers=headers, content=content)

# MHTML parsing module

from .boundary import BoundaryState, resolve_boundary
from .byte_utils import CRLF, bytes_equal, collect, index_of, split_stream
from .decoders import (
    DEFAULT_DECODERS,
    Decoder,
    build_decoder_registry,
    configured_overrides,
    decode_base64,
    decode_binary,
    decode_identity,
    decode_quoted_printable,
    select_decoder,
)
from .headers import MhtmlHeaders, decode_header_value, parse_headers
from .mhtml_parser import AssemblerState, MhtmlPart, ParserPhase, parse_mhtml
from .sources import iter_file_chunks, iter_stream_chunks

__all__ = [
    "parse_mhtml",
    "MhtmlPart",
    "MhtmlHeaders",
    "ParserPhase",
    "AssemblerState",
    "BoundaryState",
    "resolve_boundary",
    "parse_headers",
    "decode_header_value",
    "Decoder",
    "DEFAULT_DECODERS",
    "build_decoder_registry",
    "configured_overrides",
    "select_decoder",
    "decode_identity",
    "decode_base64",
    "decode_quoted_printable",
    "decode_binary",
    "CRLF",
    "bytes_equal",
    "index_of",
    "split_stream",
    "collect",
    "iter_file_chunks",
    "iter_stream_chunks",
]

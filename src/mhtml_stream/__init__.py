"""
Streaming parser for MHTML web archives.
"""

from .errors import DecodeError, EncodingError, MhtmlParseError, StructuralError
from .parsing import MhtmlHeaders, MhtmlPart, parse_mhtml

__all__ = [
    "parse_mhtml",
    "MhtmlPart",
    "MhtmlHeaders",
    "MhtmlParseError",
    "StructuralError",
    "EncodingError",
    "DecodeError",
]

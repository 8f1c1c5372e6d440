"""
Content-Transfer-Encoding decoders.

A decoder is any callable taking an iterable of raw body lines (delimiter already
removed) and returning an iterable of decoded byte chunks. Decoders are pulled
lazily by the part assembler, one input line at a time.
"""

import base64
import binascii
from functools import partial
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional

from ..errors import DecodeError, EncodingError
from .headers import MhtmlHeaders

Decoder = Callable[[Iterable[bytes]], Iterable[bytes]]

DEFAULT_ENCODING = "7bit"

# Default newline for quoted printable lines that don't end with a soft break
QP_NEWLINE = b"\n"

_EQUALS = 0x3D
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


def decode_identity(lines: Iterable[bytes]) -> Iterator[bytes]:
    """Decoder for 7bit and 8bit: every line passes through unchanged."""
    for line in lines:
        yield line


def decode_base64(lines: Iterable[bytes]) -> Iterator[bytes]:
    """
    Decoder for base64.

    Each line is decoded on its own as a complete base64 token.

    Raises:
        DecodeError: If a line is not valid base64
    """
    for line in lines:
        try:
            yield base64.b64decode(line, validate=True)
        except binascii.Error as e:
            raise DecodeError(f"invalid base64 content line {bytes(line)!r}: {e}") from e


def decode_quoted_printable(
    lines: Iterable[bytes], newline: bytes = QP_NEWLINE
) -> Iterator[bytes]:
    """
    Decoder for quoted printable.

    Lines not ending in a soft break ("=") get ``newline`` appended, so each input
    line produces exactly one output chunk.

    Args:
        lines: Raw body lines
        newline: Marker appended for hard line breaks

    Raises:
        DecodeError: On a non-ASCII byte or a malformed escape sequence
    """
    for line in lines:
        out = bytearray()
        soft_break = False
        ind = 0
        length = len(line)
        while ind < length:
            code = line[ind]
            if code >= 128:
                raise DecodeError(
                    f"got non-ascii character when decoding quoted printable: {code}"
                )
            if code != _EQUALS:
                out.append(code)
                ind += 1
            elif ind + 1 == length:
                soft_break = True
                ind += 1
            elif ind + 2 == length:
                raise DecodeError(
                    "quoted printable escape (=) was not followed by two bytes: "
                    f"{bytes(line)!r}"
                )
            else:
                high, low = line[ind + 1], line[ind + 2]
                if high not in _HEX_DIGITS or low not in _HEX_DIGITS:
                    raise DecodeError(
                        "quoted printable escape (=) was not followed by two hex digits: "
                        f"{bytes(line)!r}"
                    )
                out.append(int(bytes((high, low)), 16))
                ind += 3
        if not soft_break:
            out.extend(newline)
        yield bytes(out)


def decode_binary(lines: Iterable[bytes]) -> Iterator[bytes]:
    """
    Decoder for binary.

    Binary content can't be delimited by a line splitter, so this always fails,
    before touching its input.

    Raises:
        EncodingError: Always
    """
    raise EncodingError(
        "binary transfer-encoding is explicitly not supported and trying to add an "
        "implementation will likely result in unexpected results, but if you want to "
        "ignore anyway, override binary with decode_identity"
    )


DEFAULT_DECODERS: Dict[str, Decoder] = {
    "7bit": decode_identity,
    "8bit": decode_identity,
    "base64": decode_base64,
    "quoted-printable": decode_quoted_printable,
    "binary": decode_binary,
}


def build_decoder_registry(
    overrides: Optional[Mapping[str, Decoder]] = None,
) -> Dict[str, Decoder]:
    """
    Merge caller overrides over the default decoders.

    Args:
        overrides: Mapping of encoding name to decoder, wins on name collisions

    Returns:
        New registry dict
    """
    registry = dict(DEFAULT_DECODERS)
    if overrides:
        registry.update(overrides)
    return registry


def configured_overrides(binary_as_8bit: bool = False, qp_newline: str = "\n") -> Dict[str, Decoder]:
    """
    Build decoder overrides from configuration flags.

    Args:
        binary_as_8bit: Decode "binary" parts line by line like 8bit
        qp_newline: Newline marker for quoted printable hard line breaks

    Returns:
        Overrides for parse_mhtml (empty when everything is default)
    """
    overrides: Dict[str, Decoder] = {}
    if binary_as_8bit:
        overrides["binary"] = decode_identity
    newline = qp_newline.encode("ascii")
    if newline != QP_NEWLINE:
        overrides["quoted-printable"] = partial(decode_quoted_printable, newline=newline)
    return overrides


def select_decoder(headers: MhtmlHeaders, registry: Mapping[str, Decoder]) -> Decoder:
    """
    Pick the decoder for a part from its Content-Transfer-Encoding header.

    Args:
        headers: Headers of the part
        registry: Encoding name to decoder mapping

    Returns:
        Matching decoder

    Raises:
        EncodingError: If no decoder is registered for the encoding
    """
    encoding = headers.get("Content-Transfer-Encoding")
    if encoding is None:
        encoding = DEFAULT_ENCODING
    decode = registry.get(encoding)
    if decode is None:
        decode = registry.get(encoding.lower())
    if decode is None:
        raise EncodingError(f"unhandled encoding type: {encoding}")
    return decode

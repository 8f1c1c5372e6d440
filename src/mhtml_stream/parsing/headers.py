"""
Header container and header block parsing for MHTML parts.

Header blocks are CRLF separated "Key: value" lines terminated by an empty line.
Values may be folded onto whitespace-prefixed continuation lines and may be
RFC 2047 encoded words (``=?charset?Q|B?text?=``).
"""

import base64
import binascii
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import DecodeError, StructuralError

KEY_VALUE_DELIMITER = ": "

_ENCODED_WORD = re.compile(r"^=\?([^?\s]+)\?([BbQq])\?([^?\s]+)\?=$")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class MhtmlHeaders:
    """
    Ordered multi-valued header container.

    Tries to somewhat mimic the fetch-api Headers object: values for a repeated
    key are appended, never overwritten, and both keys and values keep insertion
    order. Lookups ignore case; iteration reports the first spelling seen.

    Iterating yields ``(key, joined_values)`` pairs, so ``dict(headers)`` works.
    """

    def __init__(self) -> None:
        self._raw: Dict[str, List[str]] = {}
        self._names: Dict[str, str] = {}
        self._frozen = False

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return self.entries()

    def __len__(self) -> int:
        return len(self._raw)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __repr__(self) -> str:
        return f"MhtmlHeaders({list(self.entries_all())!r})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject any further appends."""
        self._frozen = True

    def append(self, key: str, value: str) -> None:
        """
        Add a key-value pair. If the key is already present the value is appended.

        Raises:
            TypeError: If the container has been frozen
        """
        if self._frozen:
            raise TypeError("headers are frozen and can't be modified")
        name = self._names.setdefault(key.lower(), key)
        self._raw.setdefault(name, []).append(value)

    def get(self, key: str, delimiter: str = ", ") -> Optional[str]:
        """
        Get the value for a key.

        Returns None for a missing key; multiple values are joined by ``delimiter``.
        """
        values = self._lookup(key)
        if values is None:
            return None
        return delimiter.join(values)

    def get_all(self, key: str) -> List[str]:
        """Get all values for a key, in insertion order."""
        return list(self._lookup(key) or [])

    def has(self, key: str) -> bool:
        return key.lower() in self._names

    def keys(self) -> Iterator[str]:
        return iter(self._raw)

    def values(self, delimiter: str = ", ") -> Iterator[str]:
        for values in self._raw.values():
            yield delimiter.join(values)

    def values_all(self) -> Iterator[str]:
        for values in self._raw.values():
            yield from values

    def entries(self, delimiter: str = ", ") -> Iterator[Tuple[str, str]]:
        for key, values in self._raw.items():
            yield key, delimiter.join(values)

    def entries_all(self) -> Iterator[Tuple[str, str]]:
        for key, values in self._raw.items():
            for value in values:
                yield key, value

    def _lookup(self, key: str) -> Optional[List[str]]:
        name = self._names.get(key.lower())
        return None if name is None else self._raw[name]


def decode_q_encoding(text: str) -> bytes:
    """
    Decode the payload of a Q-encoded word.

    Args:
        text: Payload between the encoding marker and the closing ``?=``

    Returns:
        Raw bytes, still in the word's charset

    Raises:
        DecodeError: On non-ASCII characters or a malformed ``=XY`` escape
    """
    out = bytearray()
    ind = 0
    while ind < len(text):
        char = text[ind]
        if ord(char) >= 128:
            raise DecodeError(f'got non-ascii character when decoding q-quoted word: "{text}"')
        if char == "_":
            out.append(0x20)
            ind += 1
        elif char == "=":
            escape = text[ind + 1 : ind + 3]
            if len(escape) != 2 or not set(escape) <= _HEX_DIGITS:
                raise DecodeError(f'malformed escape when decoding q-quoted word: "{text}"')
            out.append(int(escape, 16))
            ind += 3
        else:
            out.append(ord(char))
            ind += 1
    return bytes(out)


def is_encoded_word(segment: str) -> bool:
    """Whether the whole segment is a single RFC 2047 encoded word."""
    return _ENCODED_WORD.match(segment) is not None


def decode_header_value(segment: str) -> str:
    """
    Decode a header value segment that may be an encoded word.

    Segments that aren't exactly one encoded word are returned verbatim.

    Raises:
        DecodeError: If the payload or the charset can't be decoded
    """
    match = _ENCODED_WORD.match(segment)
    if match is None:
        return segment

    charset, encoding, text = match.groups()
    if encoding.upper() == "Q":
        raw = decode_q_encoding(text)
    else:
        try:
            raw = base64.b64decode(text, validate=True)
        except binascii.Error as e:
            raise DecodeError(f'invalid base64 in b-encoded word: "{segment}"') from e

    try:
        return raw.decode(charset)
    except LookupError as e:
        raise DecodeError(f'unknown charset "{charset}" in encoded word: "{segment}"') from e
    except UnicodeError as e:
        raise DecodeError(f'bytes not valid {charset} in encoded word: "{segment}"') from e


def parse_headers(lines: Iterable[bytes]) -> MhtmlHeaders:
    """
    Parse one header block from a line iterator.

    Consumes lines up to and including the empty line that ends the block.
    Continuation lines are joined to the current value with a single space,
    except that two adjacent encoded words are joined directly.

    Args:
        lines: Line iterator shared with the rest of the parse

    Returns:
        Populated MhtmlHeaders

    Raises:
        StructuralError: On a missing delimiter, an orphan continuation line or a
            block without a terminating empty line
        DecodeError: If an encoded word can't be decoded
    """
    headers = MhtmlHeaders()
    key: Optional[str] = None
    value = ""
    last_encoded = False

    for raw in lines:
        line = raw.decode("utf-8", errors="replace")

        if line[:1].isspace():
            # header folded
            if key is None:
                raise StructuralError(f'header continuation line without a header: "{line}"')
            segment = line.lstrip()
            encoded = is_encoded_word(segment)
            if not (encoded and last_encoded):
                value += " "
            value += decode_header_value(segment)
            last_encoded = encoded
            continue

        if key is not None:
            headers.append(key, value)
        if not line:
            return headers

        delim = line.find(KEY_VALUE_DELIMITER)
        if delim == -1:
            raise StructuralError(f'header line didn\'t have key-value delimiter: "{line}"')
        key = line[:delim]
        segment = line[delim + len(KEY_VALUE_DELIMITER):]
        value = decode_header_value(segment)
        last_encoded = is_encoded_word(segment)

    raise StructuralError("didn't find an empty line to signify the end of header parsing")

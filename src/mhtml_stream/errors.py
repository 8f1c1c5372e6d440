"""
Exception hierarchy for MHTML parsing.

Every failure aborts the current parse. Parts that were already yielded stay valid.
"""


class MhtmlParseError(ValueError):
    """Base class for all errors raised while parsing an MHTML stream."""


class StructuralError(MhtmlParseError):
    """The stream does not follow the multipart layout (headers, boundaries)."""


class EncodingError(MhtmlParseError):
    """A Content-Transfer-Encoding is unknown or explicitly unsupported."""


class DecodeError(MhtmlParseError):
    """Encoded content (quoted-printable, base64, encoded words) is malformed."""

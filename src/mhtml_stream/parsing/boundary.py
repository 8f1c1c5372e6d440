"""
Multipart boundary extraction from the first header block.
"""

from dataclasses import dataclass

from ..errors import StructuralError
from .headers import MhtmlHeaders

FIELD_DELIMITER = "; "
BOUNDARY_PARAM = "boundary="


@dataclass(frozen=True)
class BoundaryState:
    """
    Boundary markers shared by every part of one stream.

    Attributes:
        boundary: Line separating two parts (``--token``)
        terminus: Line ending the last part (``--token--``)
    """

    boundary: bytes
    terminus: bytes

    @classmethod
    def from_token(cls, token: str) -> "BoundaryState":
        encoded = token.encode("utf-8")
        return cls(boundary=b"--" + encoded, terminus=b"--" + encoded + b"--")


def resolve_boundary(headers: MhtmlHeaders) -> BoundaryState:
    """
    Extract the boundary and terminus markers from a multipart Content-Type.

    Args:
        headers: Headers of the first block of the stream

    Returns:
        BoundaryState with the exact marker bytes

    Raises:
        StructuralError: If Content-Type is missing, isn't multipart or has no boundary
    """
    content_type = headers.get("Content-Type")
    if content_type is None:
        raise StructuralError(
            f"first headers didn't contain a content type: {dict(headers)}"
        )

    token = None
    multipart = False
    for field in content_type.split(FIELD_DELIMITER):
        if field.startswith("multipart/"):
            multipart = True
        elif field.startswith(BOUNDARY_PARAM):
            token = field[len(BOUNDARY_PARAM):]
            if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
                token = token[1:-1]

    if not multipart or token is None:
        raise StructuralError(
            "first content type header didn't contain 'multipart/...' and a boundary "
            f"string: {content_type}"
        )
    return BoundaryState.from_token(token)

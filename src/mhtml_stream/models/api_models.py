"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API response validation.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class PartSummary(BaseModel):
    """Summary of one parsed MHTML part (content itself is not returned)."""

    index: int = Field(description="Position of the part in the archive, 0 is the envelope")
    headers: List[Tuple[str, str]] = Field(
        default_factory=list, description="All header key-value pairs in order"
    )
    content_type: Optional[str] = Field(None, description="Content-Type header")
    content_location: Optional[str] = Field(None, description="Content-Location header")
    transfer_encoding: str = Field(description="Content-Transfer-Encoding used to decode")
    size_bytes: int = Field(description="Size of the decoded content in bytes")
    sha256: str = Field(description="Hex SHA-256 of the decoded content")


class ParseMhtmlResponse(BaseModel):
    """Response model for the MHTML parse endpoint."""

    success: bool = Field(description="Whether the whole archive parsed")
    parts: List[PartSummary] = Field(
        default_factory=list,
        description="Parsed parts, including those parsed before a failure",
    )
    error: Optional[str] = Field(None, description="Error message if failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    parser_version: str = Field(description="MHTML parser version")

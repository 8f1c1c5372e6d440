# Data models for the MHTML parsing service

from .api_models import (
    HealthResponse,
    ParseMhtmlResponse,
    PartSummary,
    VersionResponse,
)

__all__ = [
    "PartSummary",
    "ParseMhtmlResponse",
    "HealthResponse",
    "VersionResponse",
]

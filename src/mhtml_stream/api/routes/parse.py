"""
MHTML parse endpoint - streams an uploaded archive through the parser.
"""

import hashlib
from time import time
from typing import BinaryIO, List, Optional, Tuple

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
import structlog

from ...config import settings
from ...errors import MhtmlParseError
from ...models.api_models import ParseMhtmlResponse, PartSummary
from ...parsing import MhtmlPart, configured_overrides, iter_stream_chunks, parse_mhtml

logger = structlog.get_logger(__name__)
router = APIRouter()

ALLOWED_SUFFIXES = (".mhtml", ".mht")


def summarize_part(index: int, part: MhtmlPart) -> PartSummary:
    """Build the API summary of a parsed part."""
    return PartSummary(
        index=index,
        headers=list(part.headers.entries_all()),
        content_type=part.content_type,
        content_location=part.content_location,
        transfer_encoding=part.transfer_encoding,
        size_bytes=len(part.content),
        sha256=hashlib.sha256(part.content).hexdigest(),
    )


def summarize_stream(stream: BinaryIO) -> Tuple[List[PartSummary], Optional[str]]:
    """
    Parse an archive from a file-like object, keeping the parts that were parsed
    before any error.

    Returns:
        Tuple of (part summaries, error message or None)
    """
    overrides = configured_overrides(settings.binary_as_8bit, settings.qp_newline)
    summaries: List[PartSummary] = []
    try:
        for index, part in enumerate(parse_mhtml(iter_stream_chunks(stream), overrides)):
            summaries.append(summarize_part(index, part))
    except MhtmlParseError as e:
        return summaries, str(e)
    return summaries, None


@router.post("/mhtml", response_model=ParseMhtmlResponse)
async def parse_mhtml_file(
    file: UploadFile = File(..., description=".mhtml archive to parse"),
) -> ParseMhtmlResponse:
    """
    Parse an uploaded MHTML archive and summarize its parts.

    The upload is read in chunks and parsed in the thread pool. A malformed
    archive returns success=False with the error and the parts parsed before it.

    Args:
        file: Uploaded .mhtml or .mht file

    Returns:
        ParseMhtmlResponse with part summaries or error
    """
    start_time = time()

    if not file.filename or not file.filename.lower().endswith(ALLOWED_SUFFIXES):
        raise HTTPException(status_code=400, detail="File must be .mhtml or .mht format")

    if file.size is not None:
        size_mb = file.size / (1024 * 1024)
        if size_mb > settings.max_upload_size_mb:
            raise HTTPException(
                status_code=413,
                detail=f"File size ({size_mb:.1f}MB) exceeds maximum ({settings.max_upload_size_mb}MB)",
            )

    logger.info("Starting MHTML parse", filename=file.filename, size_bytes=file.size)

    summaries, error = await run_in_threadpool(summarize_stream, file.file)

    processing_time_ms = (time() - start_time) * 1000
    if error is not None:
        logger.error(
            "MHTML parse failed",
            filename=file.filename,
            error=error,
            parts_parsed=len(summaries),
        )
        return ParseMhtmlResponse(success=False, parts=summaries, error=error)

    logger.info(
        "MHTML parsed successfully",
        filename=file.filename,
        parts_count=len(summaries),
        processing_time_ms=round(processing_time_ms, 2),
    )
    return ParseMhtmlResponse(success=True, parts=summaries)

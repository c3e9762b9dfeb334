"""Video streaming route with HTTP byte-range support."""

import logging
import mimetypes
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple

import aiofiles
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["video"])

CHUNK_SIZE = 64 * 1024
DEFAULT_CONTENT_TYPE = "video/mp4"


class RangeNotSatisfiable(ValueError):
    """Raised when a Range header cannot be served for the file."""


def parse_range_header(range_header: str, file_size: int) -> Tuple[int, int]:
    """Resolve a ``bytes=start-end`` header to an inclusive byte span.

    Supports open-ended (``bytes=500-``) and suffix (``bytes=-500``) forms.
    An end past the last byte is clamped. Only the first range of a
    multi-range header is honored.

    Raises:
        RangeNotSatisfiable: malformed header or a span outside the file
    """
    unit, _, ranges = range_header.strip().partition("=")
    if unit.strip().lower() != "bytes" or not ranges:
        raise RangeNotSatisfiable(range_header)

    first = ranges.split(",")[0].strip()
    start_s, sep, end_s = first.partition("-")
    if not sep:
        raise RangeNotSatisfiable(range_header)

    try:
        if start_s == "":
            # Suffix range: the last N bytes
            length = int(end_s)
            if length <= 0:
                raise RangeNotSatisfiable(range_header)
            start = max(file_size - length, 0)
            end = file_size - 1
        else:
            start = int(start_s)
            end = int(end_s) if end_s else file_size - 1
    except ValueError as e:
        raise RangeNotSatisfiable(range_header) from e

    end = min(end, file_size - 1)
    if start < 0 or start >= file_size or start > end:
        raise RangeNotSatisfiable(range_header)
    return start, end


def guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or DEFAULT_CONTENT_TYPE


async def iter_file(path: Path, start: int = 0, length: Optional[int] = None) -> AsyncIterator[bytes]:
    """Yield ``length`` bytes of a file starting at ``start`` (to EOF if None)."""
    async with aiofiles.open(path, "rb") as f:
        await f.seek(start)
        remaining = length
        while remaining is None or remaining > 0:
            chunk_sz = CHUNK_SIZE if remaining is None else min(CHUNK_SIZE, remaining)
            data = await f.read(chunk_sz)
            if not data:
                break
            if remaining is not None:
                remaining -= len(data)
            yield data


@router.get("/video")
async def stream_video(request: Request):
    """Serve the configured video file, honoring Range requests."""
    video_path: Path = request.app.state.settings.video_path

    if not video_path.is_file():
        logger.warning("[Video] File not found: %s", video_path)
        return JSONResponse({"error": "Video file not found"}, status_code=404)

    file_size = video_path.stat().st_size
    content_type = guess_content_type(video_path)
    range_header = request.headers.get("range")

    if range_header:
        try:
            start, end = parse_range_header(range_header, file_size)
        except RangeNotSatisfiable:
            logger.debug("[Video] Unsatisfiable range %r for %d bytes", range_header, file_size)
            return Response(
                status_code=416,
                headers={"Content-Range": f"bytes */{file_size}", "Accept-Ranges": "bytes"},
            )

        content_length = end - start + 1
        return StreamingResponse(
            iter_file(video_path, start, content_length),
            status_code=206,
            headers={
                "Content-Range": f"bytes {start}-{end}/{file_size}",
                "Accept-Ranges": "bytes",
                "Content-Length": str(content_length),
                "Content-Type": content_type,
            },
        )

    return StreamingResponse(
        iter_file(video_path),
        headers={
            "Content-Length": str(file_size),
            "Content-Type": content_type,
            "Accept-Ranges": "bytes",
        },
    )

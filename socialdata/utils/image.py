"""
Embedded image utility functions
"""
import asyncio
import base64
import io
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from xml.sax.saxutils import escape

import aiofiles
import httpx
from PIL import Image, ImageOps

from socialdata.config import settings
from socialdata.exceptions import ImageProcessingError, ImageTooLargeError

logger = logging.getLogger(__name__)

AVATAR_COLORS = ['#6200ee', '#03dac6', '#ff5722', '#4caf50', '#ff9800', '#e91e63']


async def read_image_reference(reference: str) -> bytes:
    """
    Load the raw bytes behind an image reference

    Accepts a local path, a file:// URI or an http(s) URL.
    """
    parsed = urlparse(reference)

    if parsed.scheme in ("http", "https"):
        async with httpx.AsyncClient(timeout=settings.IMAGE_FETCH_TIMEOUT) as client:
            response = await client.get(reference)
            response.raise_for_status()
            return response.content

    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(reference)

    async with aiofiles.open(path, 'rb') as image_file:
        return await image_file.read()


def _reencode_jpeg(raw: bytes, max_width: int, quality: float) -> bytes:
    with Image.open(io.BytesIO(raw)) as source:
        image = ImageOps.exif_transpose(source)

        if image.mode != "RGB":
            image = image.convert("RGB")

        if image.width > max_width:
            height = max(1, round(image.height * max_width / image.width))
            image = image.resize((max_width, height), Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, format="JPEG", quality=int(quality * 100), optimize=True)
        return output.getvalue()


async def encode_image(
    reference: str,
    max_width: Optional[int] = None,
    quality: Optional[float] = None,
    max_length: Optional[int] = None
) -> str:
    """
    Re-encode an image into a compact data URL for embedding in a document

    Returns:
        data:image/jpeg;base64,... string no longer than max_length
    """
    max_width = max_width or settings.IMAGE_MAX_WIDTH
    quality = quality or settings.IMAGE_QUALITY
    max_length = max_length or settings.MAX_IMAGE_DATA_LENGTH

    try:
        raw = await read_image_reference(reference)
        encoded = await asyncio.to_thread(_reencode_jpeg, raw, max_width, quality)
    except Exception as e:
        logger.error(f"Error processing image: {e}")
        raise ImageProcessingError("Failed to process image") from e

    data_url = "data:image/jpeg;base64," + base64.b64encode(encoded).decode("ascii")

    if len(data_url) > max_length:
        logger.warning(f"Encoded image is {len(data_url)} characters, limit is {max_length}")
        raise ImageTooLargeError("Image too large. Please choose a smaller image.")

    return data_url


def generate_avatar_placeholder(name: str) -> str:
    """
    Generate an SVG avatar with the name's initials

    The colour is picked from a fixed palette by name length.
    """
    initials = escape(name[:2].upper())
    color = AVATAR_COLORS[len(name) % len(AVATAR_COLORS)]

    svg = (
        '<svg width="100" height="100" xmlns="http://www.w3.org/2000/svg">'
        f'<circle cx="50" cy="50" r="50" fill="{color}"/>'
        f'<text x="50" y="60" font-family="Arial" font-size="30" fill="white" text-anchor="middle">{initials}</text>'
        '</svg>'
    )

    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")

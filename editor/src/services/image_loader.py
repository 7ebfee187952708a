"""Image source loading for overlays and target images.

Turns an image source into a decoded RGBA Pillow image. Accepted sources:
- an already decoded PIL.Image.Image (copied, never mutated)
- raw encoded bytes
- a local file path (str or Path) or a file:// URL
- a data: URL (base64 or percent-encoded payload)
- an http(s):// URL, fetched with requests

Decoding is blocking; load_image() runs it in the event loop's executor so
callers can await it. Every failure surfaces as ImageLoadError.
"""

import asyncio
import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests
from PIL import Image, ImageOps

from constants import REMOTE_FETCH_TIMEOUT
from utils.errors import ImageLoadError

logger = logging.getLogger(__name__)


def _read_data_url(url):
    header, sep, payload = url.partition(',')
    if not sep:
        raise ImageLoadError(url, "malformed data URL")
    if header.endswith(';base64'):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(url, f"invalid base64 payload ({e})")
    return unquote(payload).encode('latin-1')


def download_image(url, timeout=REMOTE_FETCH_TIMEOUT):
    """Download an image from an http(s) URL.

    Returns:
        The image data as bytes
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ImageLoadError(url, str(e))
    return response.content


def read_source_bytes(source):
    """Fetch the encoded bytes behind a source string or path.

    Raises:
        ImageLoadError: if the source cannot be read
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        return _read_source(source)
    except ValueError as e:
        # e.g. a NUL byte in a path or a data URL that is not latin-1
        raise ImageLoadError(source, str(e) or type(e).__name__)


def _read_source(source):
    if isinstance(source, Path):
        path = source
    else:
        text = str(source)
        if text.startswith('data:'):
            return _read_data_url(text)
        parsed = urlparse(text)
        if parsed.scheme in ('http', 'https'):
            return download_image(text)
        if parsed.scheme == 'file':
            path = Path(unquote(parsed.path))
        else:
            path = Path(text)

    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageLoadError(source, e.strerror or str(e))


def decode_image(source):
    """Decode a source into a fresh RGBA image (blocking).

    EXIF orientation is applied so the raster matches what a browser shows.

    Raises:
        ImageLoadError: if the source cannot be fetched or decoded
    """
    if isinstance(source, Image.Image):
        return source.convert('RGBA') if source.mode != 'RGBA' else source.copy()

    data = read_source_bytes(source)
    if not data:
        raise ImageLoadError(source, "empty image data")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            return img.convert('RGBA')
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(source, str(e) or type(e).__name__)


async def load_image(source, executor=None):
    """Awaitable decode with an explicit error channel (ImageLoadError).

    Args:
        source: Any supported image source
        executor: concurrent.futures executor, default loop executor if None
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, decode_image, source)


def encode_png(image):
    """Encode a raster as PNG bytes for handing back to the host."""
    output = BytesIO()
    image.save(output, format='PNG')
    return output.getvalue()

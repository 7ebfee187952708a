"""Brand Kit Compositor Service.

Bakes an ordered list of brand elements onto one target image at the
target's native resolution. Output is a new RGBA raster of the target's size;
the input raster is never modified.

Per element, in list order:
1. decode the overlay (awaited; one overlay in memory at a time)
2. map its canvas position into target pixels
3. scale the overlay's native pixel size by the element scale
4. rotate around its centre, apply opacity, alpha-composite centred on the
   mapped position

An overlay that fails to decode is skipped with a warning. A target that
fails to decode fails the whole operation for that image.

Pixel output depends only on the target pixels, the element values and
order, and the overlay pixels: no randomness, no shared state, no
dependence on decode timing.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from constants import REFERENCE_CANVAS_SIZE
from services.image_loader import decode_image, load_image
from utils.errors import ElementDecodeError, ImageLoadError, TargetDecodeError
from utils.transform_math import overlay_placement

logger = logging.getLogger(__name__)


@dataclass
class CompositeResult:
    """Composited raster plus the elements that had to be skipped"""
    image: Image.Image
    skipped: List[Tuple[str, str]] = field(default_factory=list)  # (element_id, reason)

    @property
    def size(self):
        return self.image.size


# ----------------------------------------------------------------------
# Pixel operations
# ----------------------------------------------------------------------

def apply_opacity(overlay: Image.Image, opacity: float) -> Image.Image:
    """Multiply the alpha channel by opacity (returns a new image)"""
    if opacity >= 1.0:
        return overlay
    pixels = np.array(overlay, dtype=np.uint8)
    alpha = pixels[..., 3].astype(np.float32) * opacity
    pixels[..., 3] = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels, 'RGBA')


def render_overlay(overlay: Image.Image, width: int, height: int, rotation: float, opacity: float) -> Image.Image:
    """Scale, rotate and fade one overlay. The result's centre is the overlay centre."""
    if overlay.size != (width, height):
        overlay = overlay.resize((width, height), Image.Resampling.LANCZOS)
    if rotation:
        # Pillow rotates counter-clockwise; canvas rotation is clockwise (Y-down)
        overlay = overlay.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)
    return apply_opacity(overlay, opacity)


def paste_centered(base: Image.Image, overlay: Image.Image, center_x: float, center_y: float) -> None:
    """Alpha-composite overlay onto base (in place) with its centre at (center_x, center_y).

    Parts falling outside base are clipped.
    """
    left = int(round(center_x - overlay.width / 2.0))
    top = int(round(center_y - overlay.height / 2.0))

    # Clip to the base bounds; alpha_composite rejects negative offsets
    src_left = max(0, -left)
    src_top = max(0, -top)
    dest_left = max(0, left)
    dest_top = max(0, top)
    src_right = min(overlay.width, base.width - left)
    src_bottom = min(overlay.height, base.height - top)
    if src_right <= src_left or src_bottom <= src_top:
        return

    base.alpha_composite(overlay, dest=(dest_left, dest_top),
                         source=(src_left, src_top, src_right, src_bottom))


def draw_element(base: Image.Image, overlay: Image.Image, element, canvas_size) -> None:
    """Draw one decoded overlay for one element onto base (in place)"""
    placement = overlay_placement(
        (element.position.x, element.position.y), overlay.size,
        element.scale, element.rotation_deg,
        canvas_size=canvas_size, image_size=base.size,
    )
    rendered = render_overlay(overlay, placement.width, placement.height,
                              placement.rotation, element.opacity)
    paste_centered(base, rendered, placement.center_x, placement.center_y)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def decode_target(target) -> Image.Image:
    """Decode the target image into a fresh RGBA working buffer.

    Raises:
        TargetDecodeError: if the target cannot be decoded
    """
    try:
        return decode_image(target)
    except ImageLoadError as e:
        raise TargetDecodeError(target, e.reason)


async def composite(target, elements, canvas_size=REFERENCE_CANVAS_SIZE,
                    cancel_token=None, executor=None, on_warning=None) -> CompositeResult:
    """Bake elements onto target.

    Element decodes are awaited sequentially, in list order.

    Args:
        target: Target image source (PIL image, bytes, path or URL)
        elements: Ordered iterable of BrandElement (paint order)
        canvas_size: Reference canvas size the positions were authored on
        cancel_token: Optional CancellationToken checked before each draw
        executor: Executor for blocking decode/draw work (loop default if None)
        on_warning: Optional callable(ElementDecodeError) for skipped elements

    Returns:
        CompositeResult

    Raises:
        TargetDecodeError: if the target cannot be decoded
        CompositeCancelled: if the token was cancelled
    """
    loop = asyncio.get_running_loop()
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    # Edits made while decodes are awaited must not change this image
    elements = [e.copy() for e in elements]
    base = await loop.run_in_executor(executor, decode_target, target)
    result = CompositeResult(base)

    for element in elements:
        try:
            overlay = await load_image(element.source_url, executor)
        except ImageLoadError as e:
            _skip(result, ElementDecodeError(element.id, e.reason), on_warning)
            continue

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        await loop.run_in_executor(executor, draw_element, base, overlay, element, canvas_size)
        del overlay

    return result


def composite_sync(target, elements, canvas_size=REFERENCE_CANVAS_SIZE,
                   cancel_token=None, on_warning=None) -> CompositeResult:
    """Blocking variant of composite() for callers without an event loop."""
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()
    base = decode_target(target)
    result = CompositeResult(base)

    for element in list(elements):
        try:
            overlay = decode_image(element.source_url)
        except ImageLoadError as e:
            _skip(result, ElementDecodeError(element.id, e.reason), on_warning)
            continue
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        draw_element(base, overlay, element, canvas_size)

    return result


def _skip(result: CompositeResult, error: ElementDecodeError, on_warning: Optional[callable]) -> None:
    logger.warning("%s", error)
    result.skipped.append((error.element_id, error.reason))
    if on_warning is not None:
        on_warning(error)

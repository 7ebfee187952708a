"""Batch Orchestrator Service.

Runs the compositor over several target images ("Apply to all images").

Scheduling is group-by-group: the inputs are split into consecutive groups
of `concurrency` images, a group's tasks run concurrently, and the next group
starts only after every task of the current one has settled. So at most
`concurrency` images are ever in flight.

Each task decodes its own target into its own buffer; nothing mutable is
shared between tasks. One image failing never affects its siblings, and no
exception escapes run(): every image gets a BatchItemResult, in input order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from PIL import Image

from constants import BATCH_CONCURRENCY, BATCH_MAX_IMAGES, REFERENCE_CANVAS_SIZE
from services.compositor import composite
from services.image_loader import decode_image
from utils.errors import BrandKitError, CompositeCancelled, ImageLoadError, TargetDecodeError

logger = logging.getLogger(__name__)


@dataclass
class BatchItemResult:
    """Outcome for one target image"""
    index: int
    source: object
    ok: bool
    image: Optional[Image.Image] = None
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None


def square_crop(image: Image.Image) -> Image.Image:
    """Centred square crop with side min(width, height)"""
    side = min(image.width, image.height)
    left = (image.width - side) // 2
    top = (image.height - side) // 2
    return image.crop((left, top, left + side, top + side))


def decode_square_target(source) -> Image.Image:
    """Decode a target and crop it square.

    Raises:
        TargetDecodeError: if the target cannot be decoded
    """
    try:
        return square_crop(decode_image(source))
    except ImageLoadError as e:
        raise TargetDecodeError(source, e.reason)


def partition(items, size):
    """Split items into consecutive groups of at most size"""
    return [items[i:i + size] for i in range(0, len(items), size)]


def _report_progress(progress, completed, total):
    if progress is None:
        return
    try:
        progress(completed, total)
    except Exception:
        # A broken listener must not lose the batch results
        logger.exception("Batch progress callback failed at %d/%d", completed, total)


class BatchOrchestrator:
    """Concurrency-bounded driver of the compositor over many targets"""

    def __init__(self, concurrency=BATCH_CONCURRENCY, max_images=BATCH_MAX_IMAGES,
                 canvas_size=REFERENCE_CANVAS_SIZE, executor=None):
        """
        Args:
            concurrency: Images composited at the same time (group size)
            max_images: Largest batch accepted
            canvas_size: Reference canvas size element positions were authored on
            executor: Executor for blocking decode/draw work (loop default if None)
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if max_images < 1:
            raise ValueError(f"max_images must be at least 1, got {max_images}")
        self.concurrency = concurrency
        self.max_images = max_images
        self.canvas_size = canvas_size
        self.executor = executor

        self._in_flight = 0
        self.peak_in_flight = 0

    async def run(self, targets, config, auto_square_crop=False, cancel_token=None,
                  progress: Optional[Callable[[int, int], None]] = None) -> List[BatchItemResult]:
        """Composite config onto every target.

        Args:
            targets: Ordered list of target image sources
            config: BrandKitConfig (or any ordered iterable of BrandElement)
            auto_square_crop: Crop each target to a centred square first
            cancel_token: Optional CancellationToken, checked before each group
            progress: Optional callable(completed, total) after each settled task

        Returns:
            One BatchItemResult per target, in input order. A batch larger
            than max_images is not started; every target reports the limit.
        """
        targets = list(targets)
        if len(targets) > self.max_images:
            reason = f"At most {self.max_images} images per batch, got {len(targets)}"
            logger.warning("Batch rejected: %s", reason)
            return [BatchItemResult(index, source, False, error=reason)
                    for index, source in enumerate(targets)]

        # Snapshot so edits made while the batch runs cannot leak in
        elements = [e.copy() for e in config]
        total = len(targets)
        results: List[Optional[BatchItemResult]] = [None] * total
        completed = 0
        self.peak_in_flight = 0

        logger.info("Batch started: %d image(s), %d element(s), concurrency %d",
                    total, len(elements), self.concurrency)

        for group in partition(list(enumerate(targets)), self.concurrency):
            if cancel_token is not None and cancel_token.cancelled:
                for index, source in group:
                    results[index] = BatchItemResult(index, source, False, error='cancelled')
                    completed += 1
                    _report_progress(progress, completed, total)
                continue

            outcomes = await asyncio.gather(
                *(self._run_one(index, source, elements, auto_square_crop, cancel_token)
                  for index, source in group),
                return_exceptions=True,
            )

            for (index, source), outcome in zip(group, outcomes):
                if isinstance(outcome, BaseException):
                    # _run_one already converts the expected failures
                    logger.error("Unexpected failure compositing image %d: %r", index, outcome)
                    outcome = BatchItemResult(index, source, False, error=str(outcome) or type(outcome).__name__)
                results[index] = outcome
                completed += 1
                _report_progress(progress, completed, total)

        failed = sum(1 for r in results if not r.ok)
        logger.info("Batch finished: %d succeeded, %d failed", total - failed, failed)
        return results

    async def _run_one(self, index, source, elements, auto_square_crop, cancel_token) -> BatchItemResult:
        self._in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self._in_flight)
        try:
            target = source
            if auto_square_crop:
                loop = asyncio.get_running_loop()
                target = await loop.run_in_executor(self.executor, decode_square_target, source)

            result = await composite(target, elements, self.canvas_size,
                                     cancel_token=cancel_token, executor=self.executor)
            return BatchItemResult(index, source, True, image=result.image, skipped=result.skipped)
        except CompositeCancelled:
            return BatchItemResult(index, source, False, error='cancelled')
        except TargetDecodeError as e:
            logger.warning("%s", e)
            return BatchItemResult(index, source, False, error=e.reason)
        except BrandKitError as e:
            logger.warning("Image %d failed: %s", index, e)
            return BatchItemResult(index, source, False, error=str(e))
        finally:
            self._in_flight -= 1

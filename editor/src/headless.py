"""Headless Brand Kit Applier: CLI entry point.

Reads a brand kit JSON file (the persisted array of element records) and bakes
it onto each input image, writing one PNG per success.

Usage:
    python editor/src/headless.py <brand_kit.json> <image>... [-o OUTPUT_DIR]
                                  [--square] [--concurrency N] [-v]

Examples:
    python editor/src/headless.py kit.json photo.jpg
    python editor/src/headless.py kit.json shots/*.jpg -o branded/ --square
"""

import sys
import os
import argparse
import asyncio
import json
import logging

# Add editor/src to path so imports work
_src_dir = os.path.dirname(os.path.abspath(__file__))
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from constants import BATCH_CONCURRENCY, BATCH_MAX_IMAGES
from services.batch_orchestrator import BatchOrchestrator, partition
from services.brand_kit_repository import parse_brand_kit
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)


def load_brand_kit_file(file_path):
    """Read a brand kit JSON file into a BrandKitConfig.

    Raises:
        PersistenceError: if the file cannot be read or is not a record array
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            records = json.load(f)
    except (OSError, ValueError) as e:
        raise PersistenceError(f"Could not read brand kit {file_path}: {e}")
    return parse_brand_kit(records)


def output_path(output_dir, source, used_names):
    """<stem>_branded.png inside output_dir, suffixed when stems collide"""
    stem = os.path.splitext(os.path.basename(str(source)))[0] or 'image'
    name = f"{stem}_branded"
    if name in used_names:
        counter = 2
        while f"{name}_{counter}" in used_names:
            counter += 1
        name = f"{name}_{counter}"
    used_names.add(name)
    return os.path.join(output_dir, f"{name}.png")


def apply_brand_kit(config, images, output_dir, square=False, concurrency=BATCH_CONCURRENCY):
    """Run the batch over images (chunked by the batch limit) and write results.

    Returns:
        (written, failed) - list of written paths, list of (source, reason)
    """
    os.makedirs(output_dir, exist_ok=True)
    orchestrator = BatchOrchestrator(concurrency=concurrency)
    written = []
    failed = []
    used_names = set()

    for chunk in partition(list(images), BATCH_MAX_IMAGES):
        results = asyncio.run(orchestrator.run(chunk, config, auto_square_crop=square))
        for item in results:
            if not item.ok:
                failed.append((item.source, item.error))
                print(f"  [FAIL] {item.source}: {item.error}")
                continue
            out_file = output_path(output_dir, item.source, used_names)
            item.image.save(out_file, format='PNG')
            written.append(out_file)
            print(f"  [{len(written)}/{len(images)}] {os.path.basename(out_file)}")
            for element_id, reason in item.skipped:
                print(f"    skipped element {element_id}: {reason}")

    return written, failed


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Apply a brand kit (logo, watermark, contact info) to images (headless).',
    )
    parser.add_argument(
        'brand_kit',
        help='Path to a brand kit JSON file (array of element records).',
    )
    parser.add_argument(
        'images',
        nargs='+',
        help='Target images (paths or http(s) URLs).',
    )
    parser.add_argument(
        '-o', '--output',
        default='./output',
        help='Output directory for PNG files (default: ./output).',
    )
    parser.add_argument(
        '--square',
        action='store_true',
        help='Crop each target to a centred square before applying.',
    )
    parser.add_argument(
        '--concurrency',
        type=int,
        default=BATCH_CONCURRENCY,
        help=f'Images composited at the same time (default: {BATCH_CONCURRENCY}).',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if args.concurrency < 1:
        parser.error("--concurrency must be at least 1")

    brand_kit_path = os.path.abspath(args.brand_kit)
    output_dir = os.path.abspath(args.output)

    if not os.path.isfile(brand_kit_path):
        print(f"Error: Brand kit file not found: {brand_kit_path}")
        return 1

    try:
        config = load_brand_kit_file(brand_kit_path)
    except PersistenceError as e:
        print(f"Error: {e}")
        return 1

    print(f"Applying {len(config)} element(s) to {len(args.images)} image(s) ...")
    written, failed = apply_brand_kit(config, args.images, output_dir,
                                      square=args.square, concurrency=args.concurrency)

    print(f"\nDone. Wrote {len(written)} image(s) to {output_dir}/")
    if failed:
        print(f"  ({len(failed)} failed)")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

#!/usr/bin/env python3
"""
Render Every Frame
==================

Standalone script that frames one photo with every catalogue frame.

This script:
    1. Loads the frame catalogue from config (or --catalogue)
    2. Composites the photo once per frame, plus once without a frame
    3. Saves each result into the output directory
    4. Reports a per-frame summary (applied / degraded)

Usage:
    python scripts/render_all_frames.py --photo selfie.jpg
    python scripts/render_all_frames.py --photo selfie.jpg --catalogue frames.yaml --out ./renders
"""

import argparse
import asyncio
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from frame_compositor.catalogue import FrameCatalogue
from frame_compositor.compositor import Compositor
from frame_compositor.config import load_config
from frame_compositor.export import ExportSink
from frame_compositor.layout import LayoutPolicy, LayoutThresholds
from frame_compositor.raster import RasterLoader, RasterLoadError, file_to_data_uri


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def render_all(photo: str, out_dir: str, catalogue_path: str = None) -> dict:
    """
    Render the photo with every frame.

    Returns:
        Dict of frame id -> outcome ("applied", "degraded" or "failed")
    """
    settings = load_config()
    loader = RasterLoader.from_settings(settings)

    if catalogue_path:
        catalogue = FrameCatalogue.from_file(catalogue_path, loader=loader)
    else:
        catalogue = FrameCatalogue.from_settings(settings, loader=loader)
    await catalogue.load()

    compositor = Compositor(loader, LayoutPolicy(LayoutThresholds.from_settings(settings)))
    sink = ExportSink.from_settings(settings)

    photo_ref = file_to_data_uri(photo) if os.path.isfile(photo) else photo

    logger.info("=" * 60)
    logger.info(f"Photo: {photo}")
    logger.info(f"Frames: {len(catalogue)}")
    logger.info(f"Output: {out_dir}")
    logger.info("=" * 60)

    results = {}
    start_time = time.time()

    for variant in [None, *catalogue]:
        name = variant.id if variant else "(none)"
        try:
            surface = await compositor.composite(photo_ref, variant)
        except RasterLoadError as e:
            logger.error(f"{name}: photo failed to load: {e}")
            results[name] = "failed"
            break

        path = sink.save(surface, os.path.join(out_dir, name.strip("()")))
        outcome = "degraded" if surface.degraded else "applied"
        results[name] = outcome
        logger.info(f"  {name:<12} {surface.width}x{surface.height} {outcome:<9} {path}")

    logger.info("=" * 60)
    logger.info(f"Rendered {len(results)} composites in {time.time() - start_time:.1f}s")
    logger.info(f"Loader: {loader.get_metrics()}")
    logger.info(f"Compositor: {compositor.get_metrics()}")
    logger.info("=" * 60)

    return results


def main():
    parser = argparse.ArgumentParser(
        description="Frame a photo with every catalogue frame"
    )
    parser.add_argument(
        "--photo",
        type=str,
        required=True,
        help="Photo path or URL",
    )
    parser.add_argument(
        "--catalogue",
        type=str,
        default=os.environ.get("FRAMER_CATALOGUE_PATH"),
        help="Catalogue YAML file (default: from config)",
    )
    parser.add_argument(
        "--out",
        type=str,
        default="./renders",
        help="Output directory (default: ./renders)",
    )

    args = parser.parse_args()

    results = asyncio.run(render_all(
        photo=args.photo,
        out_dir=args.out,
        catalogue_path=args.catalogue,
    ))

    sys.exit(1 if "failed" in results.values() else 0)


if __name__ == "__main__":
    main()

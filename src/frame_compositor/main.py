"""
Frame Compositor CLI
====================

Command line entry point: frame a photo and save the result.

Usage:
    frame-compositor --photo selfie.jpg --frame frame1
    frame-compositor --photo https://example.com/me.png --frame frame4 --out ./exports
    frame-compositor --list-frames --config config.yaml

Exit Codes:
    0  composite written
    1  photo could not be loaded, or export failed
    2  bad arguments (unknown frame id, unreadable catalogue)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from frame_compositor.catalogue import CatalogueError, FrameCatalogue
from frame_compositor.compositor import Compositor, ExportError
from frame_compositor.config import Settings, load_config, setup_logging
from frame_compositor.export import ExportSink
from frame_compositor.layout import LayoutPolicy, LayoutThresholds
from frame_compositor.raster import RasterLoader, RasterLoadError, file_to_data_uri


logger = logging.getLogger(__name__)


def _photo_ref(photo: str) -> str:
    """Local photos go through the same image-type check as an upload."""
    if Path(photo).is_file():
        return file_to_data_uri(photo)
    return photo


async def run(args: argparse.Namespace, settings: Settings) -> int:
    loader = RasterLoader.from_settings(settings)

    if args.catalogue:
        catalogue = FrameCatalogue.from_file(args.catalogue, loader=loader, probe=settings.catalogue.probe)
    else:
        catalogue = FrameCatalogue.from_settings(settings, loader=loader)

    try:
        await catalogue.load()
    except CatalogueError as e:
        logger.error(f"Cannot load frame catalogue: {e}")
        return 2

    if args.list_frames:
        for variant in catalogue:
            print(f"{variant.id:<12} {variant.display_name:<20} {variant.layout.description}")
        return 0

    variant = None
    if args.frame:
        if args.frame not in catalogue:
            logger.error(f"Unknown frame id '{args.frame}'. Available: {[v.id for v in catalogue]}")
            return 2
        variant = catalogue.get(args.frame)

    compositor = Compositor(loader, LayoutPolicy(LayoutThresholds.from_settings(settings)))
    sink = ExportSink.from_settings(settings)

    try:
        surface = await compositor.composite(_photo_ref(args.photo), variant)
    except RasterLoadError as e:
        logger.error(f"Could not load photo: {type(e).__name__}: {e}")
        return 1

    if surface.degraded:
        logger.warning("Frame could not be loaded; exporting the photo without it")

    try:
        path = sink.save(surface, args.out or settings.export.directory)
    except (ExportError, OSError) as e:
        logger.error(f"Export failed: {e}")
        return 1

    print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frame-compositor",
        description="Overlay a decorative frame on a photo and save the result",
    )
    parser.add_argument(
        "--photo",
        type=str,
        help="Photo path, URL or data URI",
    )
    parser.add_argument(
        "--frame",
        type=str,
        default=None,
        help="Frame id from the catalogue (omit for no frame)",
    )
    parser.add_argument(
        "--catalogue",
        type=str,
        default=None,
        help="Catalogue YAML file (overrides config)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml",
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Output directory (default: export.directory from config)",
    )
    parser.add_argument(
        "--list-frames",
        action="store_true",
        help="List catalogue frames and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.list_frames and not args.photo:
        parser.error("--photo is required unless --list-frames is given")

    settings = load_config(args.config)
    setup_logging(settings)

    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()

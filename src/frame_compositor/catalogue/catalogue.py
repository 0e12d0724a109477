"""
Frame Catalogue
===============

Builds the ordered list of selectable frame variants.

Entry Formats:
    A list of entries, each with an asset_ref and optional id,
    display_name and layout:

        frames:
          - id: frame1
            display_name: Olive Wreath
            asset_ref: https://example.com/frame1.png
          - asset_ref: ./assets/frame9.png
            layout: bottom_left

    Or a mapping of file name to asset reference:

        frame1.png: https://example.com/frame1.png
        frame2.png: https://example.com/frame2.png

    Missing ids come from the asset file name ("frame1.png" -> "frame1");
    missing display names come from the id ("frame1" -> "Frame1").

Design Rules:
    - Variants are built (and their layout classified) once per load
    - The catalogue never mutates a variant; reload() builds new ones
    - reload() invalidates the raster loader cache
    - With probe=True, assets that fail to load are skipped, not fatal
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError

from frame_compositor.models.variant import FrameVariant
from frame_compositor.raster.errors import RasterLoadError
from frame_compositor.raster.loader import RasterLoader


logger = logging.getLogger(__name__)


EntrySource = Union[Sequence[Any], Mapping[str, Any]]


class CatalogueError(Exception):
    """Raised when a catalogue source is unreadable or invalid."""
    pass


def id_from_asset(asset_ref: str) -> str:
    """Variant id from the asset's file name, without extension."""
    path = urlparse(asset_ref).path if "://" in asset_ref else asset_ref
    return Path(path).stem


def display_name_from_id(variant_id: str) -> str:
    """'frame1' -> 'Frame1', 'oliveBranch' -> 'Olive Branch'."""
    spaced = re.sub(r"([A-Z])", r" \1", variant_id).strip()
    return spaced[:1].upper() + spaced[1:]


def normalize_entries(source: EntrySource) -> List[Dict[str, Any]]:
    """
    Turn any accepted entry format into a list of entry dicts.

    Raises:
        CatalogueError: If the structure is not recognized
    """
    if isinstance(source, Mapping):
        if "frames" in source:
            return normalize_entries(source["frames"] or [])
        entries = []
        for file_name, asset_ref in source.items():
            if not isinstance(asset_ref, str):
                raise CatalogueError(f"Asset reference for '{file_name}' must be a string")
            entries.append({"id": id_from_asset(str(file_name)), "asset_ref": asset_ref})
        return entries

    entries = []
    for index, item in enumerate(source):
        if hasattr(item, "model_dump"):
            item = item.model_dump()
        if isinstance(item, str):
            item = {"asset_ref": item}
        if not isinstance(item, Mapping):
            raise CatalogueError(f"Catalogue entry #{index} is not a mapping: {item!r}")
        if not item.get("asset_ref"):
            raise CatalogueError(f"Catalogue entry #{index} has no asset_ref")
        entries.append(dict(item))
    return entries


def load_catalogue_file(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read catalogue entries from a YAML (or JSON) file.

    Raises:
        CatalogueError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CatalogueError(f"Cannot read catalogue file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogueError(f"Invalid catalogue file {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, (list, dict)):
        raise CatalogueError(f"Catalogue file {path} must hold a list or a mapping")

    return normalize_entries(data)


def build_variant(entry: Mapping[str, Any]) -> FrameVariant:
    """Create a FrameVariant from one normalized entry."""
    asset_ref = entry["asset_ref"]
    variant_id = entry.get("id") or id_from_asset(asset_ref)
    display_name = entry.get("display_name") or display_name_from_id(variant_id)

    try:
        return FrameVariant(
            id=variant_id,
            display_name=display_name,
            asset_ref=asset_ref,
            layout=entry.get("layout"),
        )
    except (ValidationError, ValueError) as e:
        raise CatalogueError(f"Invalid catalogue entry '{variant_id}': {e}") from e


class FrameCatalogue:
    """
    Ordered, read-only collection of frame variants.

    Attributes:
        loader: Raster loader used for probing and cache invalidation
        probe: Whether to load each asset and skip failures

    Example:
        catalogue = FrameCatalogue.from_file("frames.yaml", loader=loader)
        await catalogue.load()
        for variant in catalogue:
            print(variant.id, variant.layout.description)
    """

    def __init__(
        self,
        entries: Optional[EntrySource] = None,
        loader: Optional[RasterLoader] = None,
        probe: bool = False,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Initialize catalogue.

        Args:
            entries: Entry list or mapping (ignored when path is given)
            loader: Raster loader (required when probe=True)
            probe: Load each asset and drop entries that fail
            path: YAML file re-read on every load
        """
        if probe and loader is None:
            raise ValueError("probe=True requires a loader")

        self.loader = loader
        self.probe = probe
        self._path = Path(path) if path is not None else None
        self._entries: EntrySource = entries if entries is not None else []

        self._variants: Tuple[FrameVariant, ...] = ()
        self._by_id: Dict[str, FrameVariant] = {}
        self._generation: int = 0

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        loader: Optional[RasterLoader] = None,
        probe: bool = False,
    ) -> "FrameCatalogue":
        return cls(loader=loader, probe=probe, path=path)

    @classmethod
    def from_settings(cls, settings, loader: Optional[RasterLoader] = None) -> "FrameCatalogue":
        """Build a catalogue from the ``catalogue`` config section."""
        cfg = settings.catalogue
        if cfg.path:
            return cls.from_file(cfg.path, loader=loader, probe=cfg.probe)
        return cls(entries=cfg.frames, loader=loader, probe=cfg.probe)

    @property
    def variants(self) -> Tuple[FrameVariant, ...]:
        return self._variants

    @property
    def generation(self) -> int:
        """Number of completed loads."""
        return self._generation

    async def load(self) -> Tuple[FrameVariant, ...]:
        """
        Build the variant list.

        Returns:
            Ordered tuple of variants

        Raises:
            CatalogueError: On an unreadable file or an invalid entry
        """
        if self._path is not None:
            entries = load_catalogue_file(self._path)
        else:
            entries = normalize_entries(self._entries)

        variants: List[FrameVariant] = []
        by_id: Dict[str, FrameVariant] = {}

        for entry in entries:
            variant = build_variant(entry)

            if variant.id in by_id:
                logger.warning(f"Duplicate frame id '{variant.id}', keeping the first entry")
                continue

            if self.probe and not await self._probe(variant):
                continue

            variants.append(variant)
            by_id[variant.id] = variant

        self._variants = tuple(variants)
        self._by_id = by_id
        self._generation += 1

        logger.info(f"Frame catalogue loaded: {len(variants)} frames (generation {self._generation})")
        return self._variants

    async def reload(self) -> Tuple[FrameVariant, ...]:
        """Drop cached assets and rebuild the variant list."""
        if self.loader is not None:
            self.loader.invalidate()
        return await self.load()

    async def _probe(self, variant: FrameVariant) -> bool:
        try:
            await self.loader.load(variant.asset_ref)
        except RasterLoadError as e:
            logger.warning(f"Frame '{variant.id}' not available, skipping: {e}")
            return False
        return True

    def get(self, variant_id: str) -> FrameVariant:
        """
        Look up a variant by id.

        Raises:
            KeyError: If no such variant is loaded
        """
        try:
            return self._by_id[variant_id]
        except KeyError:
            raise KeyError(f"Unknown frame id: {variant_id}") from None

    def __contains__(self, variant_id: object) -> bool:
        return variant_id in self._by_id

    def __iter__(self) -> Iterator[FrameVariant]:
        return iter(self._variants)

    def __len__(self) -> int:
        return len(self._variants)

"""
Catalogue Module
================

Frame catalogue loading.

Components:
    - FrameCatalogue: Ordered read-only variant collection
    - load_catalogue_file: YAML reader for catalogue files
    - CatalogueError: Invalid or unreadable catalogue
"""

from frame_compositor.catalogue.catalogue import (
    CatalogueError,
    FrameCatalogue,
    display_name_from_id,
    id_from_asset,
    load_catalogue_file,
)


__all__ = [
    "CatalogueError",
    "FrameCatalogue",
    "display_name_from_id",
    "id_from_asset",
    "load_catalogue_file",
]

"""
Compositor Session
==================

Tracks the user's current (photo, frame) selection and decides which
composite result is the one being viewed.

Concurrency Model:
    - Single asyncio event loop; raster loads are the only yield points
    - Every selection change issues a new request tagged with the next
      sequence number
    - A request whose sequence number is no longer the latest when it
      finishes is STALE: its surface is dropped, never applied
    - Cancellation is advisory: a stale request stops drawing at its next
      yield point but an in-progress decode is not interrupted

Example:
    session = CompositorSession(compositor, catalogue)
    await session.select_photo(photo_uri)
    surface = await session.select_frame("frame1")
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from frame_compositor.catalogue.catalogue import FrameCatalogue
from frame_compositor.compositor.compositor import Compositor
from frame_compositor.compositor.surface import CompositeSurface
from frame_compositor.models.variant import FrameVariant
from frame_compositor.raster.errors import RasterLoadError


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompositeRequest:
    """One composite issued by the session."""

    sequence: int
    photo_ref: str
    variant: Optional[FrameVariant]


class CompositorSession:
    """
    Selection state plus the "which composite is current" guard.

    Attributes:
        compositor: Compositor used for every request
        catalogue: Optional catalogue for selecting frames by id
    """

    def __init__(
        self,
        compositor: Compositor,
        catalogue: Optional[FrameCatalogue] = None,
    ) -> None:
        self.compositor = compositor
        self.catalogue = catalogue

        self._photo_ref: Optional[str] = None
        self._variant: Optional[FrameVariant] = None
        self._sequence: int = 0

        self._current: Optional[CompositeSurface] = None
        self._current_request: Optional[CompositeRequest] = None
        self._dropped_count: int = 0

    @property
    def photo_ref(self) -> Optional[str]:
        return self._photo_ref

    @property
    def variant(self) -> Optional[FrameVariant]:
        return self._variant

    @property
    def sequence(self) -> int:
        """Sequence number of the latest issued request."""
        return self._sequence

    @property
    def current(self) -> Optional[CompositeSurface]:
        """Surface of the latest completed, non-stale request."""
        return self._current

    @property
    def current_request(self) -> Optional[CompositeRequest]:
        return self._current_request

    @property
    def dropped_count(self) -> int:
        """Results discarded because they were stale."""
        return self._dropped_count

    def is_latest(self, sequence: int) -> bool:
        return sequence == self._sequence

    async def select_photo(self, photo_ref: str) -> Optional[CompositeSurface]:
        """Choose a new photo and recomposite."""
        self._photo_ref = photo_ref
        return await self.refresh()

    async def select_frame(
        self,
        variant: Union[FrameVariant, str, None],
    ) -> Optional[CompositeSurface]:
        """
        Choose a frame (variant, id, or None for no frame) and recomposite.

        Raises:
            KeyError: If an id is given that the catalogue does not hold
            ValueError: If an id is given and the session has no catalogue
        """
        if isinstance(variant, str):
            if self.catalogue is None:
                raise ValueError("Selecting a frame by id requires a catalogue")
            variant = self.catalogue.get(variant)
        self._variant = variant
        return await self.refresh()

    async def refresh(self) -> Optional[CompositeSurface]:
        """
        Composite the current selection.

        Returns:
            The new surface, or None if there is no photo yet or a newer
            request superseded this one

        Raises:
            FetchError, DecodeError, TaintedSourceError: If the photo of
                the latest request cannot be loaded
        """
        if self._photo_ref is None:
            return None

        self._sequence += 1
        request = CompositeRequest(
            sequence=self._sequence,
            photo_ref=self._photo_ref,
            variant=self._variant,
        )

        try:
            surface = await self.compositor.composite(
                request.photo_ref,
                request.variant,
                should_continue=lambda: self.is_latest(request.sequence),
            )
        except RasterLoadError:
            if not self.is_latest(request.sequence):
                self._dropped_count += 1
                logger.debug(f"Dropping failure of stale request #{request.sequence}")
                return None
            raise

        if not self.is_latest(request.sequence):
            self._dropped_count += 1
            logger.debug(
                f"Dropping stale composite #{request.sequence} "
                f"(latest is #{self._sequence})"
            )
            return None

        self._current = surface
        self._current_request = request
        return surface

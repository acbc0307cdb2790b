"""Domain ports (interfaces).

Hey future me - entities and pages never hold the CatalogClient itself, they
hold an ICatalogFetcher. That's the ONLY thing a stub needs to upgrade itself
or a page needs to walk its cursors. CatalogClient implements it; tests can
hand in an AsyncMock(spec=ICatalogFetcher) and count calls.

Once the client that backs a fetcher is closed, every method raises
InvalidStateException, so stubs held after close can no longer be upgraded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogspot.domain.dtos import Page, PageDirection
    from catalogspot.domain.entities import Album, Artist, Playlist, Track


class ICatalogFetcher(ABC):
    """Capability to fetch full entities and adjacent pages."""

    @abstractmethod
    async def get_artist(self, artist_id: str) -> Artist:
        """Fetch the full artist with this id.

        Raises:
            EntityNotFoundException: If the artist does not exist
            CatalogHttpError: For other non-success statuses
        """
        pass

    @abstractmethod
    async def get_album(self, album_id: str) -> Album:
        """Fetch the full album with this id."""
        pass

    @abstractmethod
    async def get_track(self, track_id: str) -> Track:
        """Fetch the full track with this id."""
        pass

    @abstractmethod
    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Fetch the full playlist with this id."""
        pass

    @abstractmethod
    async def fetch_page[T](
        self, page: Page[T], direction: PageDirection
    ) -> Page[T] | None:
        """Follow the page's next/previous cursor.

        Returns:
            The adjacent page, or None if the cursor is absent
        """
        pass


__all__ = ["ICatalogFetcher"]

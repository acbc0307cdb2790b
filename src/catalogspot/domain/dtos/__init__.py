"""
Paging envelopes and composite responses.

Hey future me - Page[T] is the generic wrapper for every paginated Spotify
response (album tracks, search categories, playlist listings). It keeps the
raw next/previous URLs uninterpreted; actually following them needs an
authorized request, so that work is delegated to the ICatalogFetcher the page
was built with.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from catalogspot.domain.exceptions import InvalidStateException

if TYPE_CHECKING:
    from catalogspot.domain.entities import Album, Artist, Playlist, Track
    from catalogspot.domain.ports import ICatalogFetcher


type ItemDecoder[T] = Callable[[dict[str, Any], ICatalogFetcher | None], T]


class PageDirection(str, Enum):
    """Which cursor of a page to follow."""

    NEXT = "next"
    PREVIOUS = "previous"


@dataclass(frozen=True, kw_only=True)
class Page[T]:
    """
    Bounded window over a larger remote result set.

    Type parameter T is the item type (Track, Album, ...).
    """

    items: list[T]
    total: int
    limit: int
    offset: int
    next: str | None = None
    previous: str | None = None
    href: str | None = None

    # Needed to decode the items of adjacent pages and to fetch them.
    decoder: ItemDecoder[T] | None = field(default=None, repr=False, compare=False)
    fetcher: ICatalogFetcher | None = field(default=None, repr=False, compare=False)
    # Search cursors answer with {"tracks": {...}} instead of a bare paging object.
    wrapper_key: str | None = field(default=None, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @property
    def has_next(self) -> bool:
        """Check if there is a next page."""
        return self.next is not None

    @property
    def has_previous(self) -> bool:
        """Check if there is a previous page."""
        return self.previous is not None

    def cursor(self, direction: PageDirection) -> str | None:
        """Raw URL of the adjacent page in the given direction."""
        if direction is PageDirection.NEXT:
            return self.next
        return self.previous

    async def fetch_page(self, direction: PageDirection = PageDirection.NEXT) -> Page[T] | None:
        """Fetch the adjacent page.

        Returns:
            The adjacent page, or None when there is no cursor in that direction

        Raises:
            InvalidStateException: If the page was built without a fetcher
        """
        if self.cursor(direction) is None:
            return None
        if self.fetcher is None or self.decoder is None:
            raise InvalidStateException(
                "Page was decoded without a fetcher and cannot load adjacent pages"
            )
        return await self.fetcher.fetch_page(self, direction)


@dataclass(frozen=True, kw_only=True)
class SearchResponse:
    """
    Result of a catalog search.

    One page per requested category. Categories that were not requested are
    None, never an empty page.
    """

    tracks: Page[Track] | None = None
    albums: Page[Album] | None = None
    artists: Page[Artist] | None = None
    playlists: Page[Playlist] | None = None


__all__ = ["ItemDecoder", "Page", "PageDirection", "SearchResponse"]

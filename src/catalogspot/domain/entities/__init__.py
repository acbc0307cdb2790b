"""Catalog entities.

Hey future me - every entity is an immutable snapshot of what Spotify returned
at fetch time. Nothing is ever written back, re-fetching gives you a new
independent instance.

Spotify embeds SIMPLIFIED objects inside other objects (the artists of a track,
the tracks of an album, ...). We don't model those as separate types: the same
class is used and ``is_partial`` tells you whether you hold a stub. Call
``await entity.fetch_full()`` to get the full version, that costs exactly one
request through the entity's fetcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self, cast

from catalogspot.domain.exceptions import InvalidStateException

if TYPE_CHECKING:
    from catalogspot.domain.dtos import Page
    from catalogspot.domain.ports import ICatalogFetcher


@dataclass(frozen=True, kw_only=True)
class Image:
    """Cover art or profile picture. Spotify usually sends 640, 300 and 64px variants."""

    url: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, kw_only=True)
class CatalogEntity:
    """Base class for everything addressable by a Spotify id."""

    id: str
    name: str = ""
    href: str | None = None
    uri: str | None = None
    external_urls: dict[str, str] = field(default_factory=dict)

    # True when decoded from an embedded stub rather than a full object.
    is_partial: bool = True

    fetcher: ICatalogFetcher | None = field(default=None, repr=False, compare=False)

    @property
    def spotify_url(self) -> str | None:
        """Link to the entity on open.spotify.com, if Spotify sent one."""
        return self.external_urls.get("spotify")

    async def fetch_full(self) -> Self:
        """Return the full version of this entity.

        A full entity returns itself without any I/O. A stub is upgraded with
        one request through its fetcher.

        Raises:
            InvalidStateException: If the stub has no fetcher, or its client was closed
        """
        if not self.is_partial:
            return self
        if self.fetcher is None:
            raise InvalidStateException(
                f"{type(self).__name__} {self.id} was decoded without a fetcher "
                "and cannot be upgraded"
            )
        return cast(Self, await self._fetch_full(self.fetcher))

    async def _fetch_full(self, fetcher: ICatalogFetcher) -> CatalogEntity:
        raise InvalidStateException(
            f"{type(self).__name__} {self.id} has no catalog endpoint to upgrade from"
        )


@dataclass(frozen=True, kw_only=True)
class Artist(CatalogEntity):
    """Spotify artist."""

    genres: list[str] = field(default_factory=list)
    popularity: int | None = None  # 0-100
    followers: int | None = None
    images: list[Image] = field(default_factory=list)

    async def _fetch_full(self, fetcher: ICatalogFetcher) -> Artist:
        return await fetcher.get_artist(self.id)


@dataclass(frozen=True, kw_only=True)
class Album(CatalogEntity):
    """Spotify album.

    ``tracks`` is only present on full albums and holds simplified tracks
    (stubs) for the first page; walk the rest with ``tracks.fetch_page()``.
    """

    album_type: str | None = None  # "album", "single", "compilation"
    artists: list[Artist] = field(default_factory=list)
    release_date: str | None = None
    release_date_precision: str | None = None  # "year", "month", "day"
    total_tracks: int | None = None
    available_markets: list[str] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    label: str | None = None
    genres: list[str] = field(default_factory=list)
    popularity: int | None = None
    tracks: Page[Track] | None = None

    async def _fetch_full(self, fetcher: ICatalogFetcher) -> Album:
        return await fetcher.get_album(self.id)


@dataclass(frozen=True, kw_only=True)
class Track(CatalogEntity):
    """Spotify track.

    Tracks embedded in an album carry no ``album`` and no ``popularity``.
    """

    artists: list[Artist] = field(default_factory=list)
    album: Album | None = None
    disc_number: int | None = None
    track_number: int | None = None
    duration_ms: int | None = None
    explicit: bool = False
    preview_url: str | None = None
    is_playable: bool | None = None
    popularity: int | None = None
    external_ids: dict[str, str] = field(default_factory=dict)

    @property
    def isrc(self) -> str | None:
        """International Standard Recording Code, if Spotify knows it."""
        return self.external_ids.get("isrc")

    async def _fetch_full(self, fetcher: ICatalogFetcher) -> Track:
        return await fetcher.get_track(self.id)


@dataclass(frozen=True, kw_only=True)
class Playlist(CatalogEntity):
    """Spotify playlist (metadata only, items are not decoded)."""

    description: str | None = None
    owner_id: str | None = None
    owner_name: str | None = None
    public: bool | None = None
    collaborative: bool = False
    snapshot_id: str | None = None
    total_tracks: int | None = None
    images: list[Image] = field(default_factory=list)
    followers: int | None = None

    async def _fetch_full(self, fetcher: ICatalogFetcher) -> Playlist:
        return await fetcher.get_playlist(self.id)


__all__ = ["Album", "Artist", "CatalogEntity", "Image", "Playlist", "Track"]

"""Mapping from Spotify JSON payloads to catalog entities.

Hey future me - this is THE central converter module, every CatalogClient
operation ends here. All functions are pure: no I/O, same JSON + fetcher in,
equal entities out. The fetcher is only stored on the results so stubs can be
upgraded and pages walked later.

Rules:
- Unknown/extra JSON keys are ignored, Spotify adds fields all the time.
- ``id`` is the only required field of an entity, ``items`` of a page.
  Missing required fields raise DecodeError.
- Full vs stub is decided by keys only the full object carries
  (popularity/genres/followers for artists, popularity/tracks for albums,
  popularity for tracks, followers for playlists).
- Bulk lookups keep ``null`` entries as None IN PLACE, so results line up
  with the requested ids (duplicates included).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from catalogspot.domain.dtos import ItemDecoder, Page, SearchResponse
from catalogspot.domain.entities import Album, Artist, Image, Playlist, Track
from catalogspot.domain.exceptions import DecodeError
from catalogspot.domain.value_objects import SearchType

if TYPE_CHECKING:
    from catalogspot.domain.ports import ICatalogFetcher

_FULL_ARTIST_KEYS = ("popularity", "genres", "followers")
_FULL_ALBUM_KEYS = ("popularity", "tracks")
_FULL_TRACK_KEYS = ("popularity",)
_FULL_PLAYLIST_KEYS = ("followers",)


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _require_id(data: dict[str, Any], what: str) -> str:
    entity_id = data.get("id")
    if not isinstance(entity_id, str) or not entity_id:
        raise DecodeError(f"{what} payload is missing 'id'")
    return entity_id


def _has_any(data: dict[str, Any], keys: tuple[str, ...]) -> bool:
    return any(key in data for key in keys)


def _list_of_str(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _str_dict(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


def _followers_total(value: Any) -> int | None:
    # {"href": null, "total": 1234}
    if isinstance(value, dict):
        total = value.get("total")
        return total if isinstance(total, int) else None
    return None


def map_image(data: dict[str, Any]) -> Image:
    """Convert a Spotify image object."""
    data = _require_object(data, "image")
    url = data.get("url")
    if not isinstance(url, str):
        raise DecodeError("Image payload is missing 'url'")
    return Image(url=url, width=data.get("width"), height=data.get("height"))


def _images(value: Any) -> list[Image]:
    if not isinstance(value, list):
        return []
    return [map_image(item) for item in value if isinstance(item, dict)]


def _artist_stubs(value: Any, fetcher: ICatalogFetcher | None) -> list[Artist]:
    if not isinstance(value, list):
        return []
    return [map_artist(item, fetcher) for item in value if item is not None]


def map_artist(data: dict[str, Any], fetcher: ICatalogFetcher | None = None) -> Artist:
    """Convert Spotify artist JSON (full or simplified) to an Artist."""
    data = _require_object(data, "artist")
    return Artist(
        id=_require_id(data, "Artist"),
        name=data.get("name") or "",
        href=data.get("href"),
        uri=data.get("uri"),
        external_urls=_str_dict(data.get("external_urls")),
        is_partial=not _has_any(data, _FULL_ARTIST_KEYS),
        genres=_list_of_str(data.get("genres")),
        popularity=data.get("popularity"),
        followers=_followers_total(data.get("followers")),
        images=_images(data.get("images")),
        fetcher=fetcher,
    )


def map_album(data: dict[str, Any], fetcher: ICatalogFetcher | None = None) -> Album:
    """Convert Spotify album JSON (full or simplified) to an Album.

    The embedded ``tracks`` paging object of a full album is decoded into a
    Page of track stubs.
    """
    data = _require_object(data, "album")
    tracks_data = data.get("tracks")
    tracks = (
        map_page(tracks_data, map_track, fetcher) if isinstance(tracks_data, dict) else None
    )
    return Album(
        id=_require_id(data, "Album"),
        name=data.get("name") or "",
        href=data.get("href"),
        uri=data.get("uri"),
        external_urls=_str_dict(data.get("external_urls")),
        is_partial=not _has_any(data, _FULL_ALBUM_KEYS),
        album_type=data.get("album_type"),
        artists=_artist_stubs(data.get("artists"), fetcher),
        release_date=data.get("release_date"),
        release_date_precision=data.get("release_date_precision"),
        total_tracks=data.get("total_tracks"),
        available_markets=_list_of_str(data.get("available_markets")),
        images=_images(data.get("images")),
        label=data.get("label"),
        genres=_list_of_str(data.get("genres")),
        popularity=data.get("popularity"),
        tracks=tracks,
        fetcher=fetcher,
    )


def map_track(data: dict[str, Any], fetcher: ICatalogFetcher | None = None) -> Track:
    """Convert Spotify track JSON (full or simplified) to a Track."""
    data = _require_object(data, "track")
    album_data = data.get("album")
    return Track(
        id=_require_id(data, "Track"),
        name=data.get("name") or "",
        href=data.get("href"),
        uri=data.get("uri"),
        external_urls=_str_dict(data.get("external_urls")),
        is_partial=not _has_any(data, _FULL_TRACK_KEYS),
        artists=_artist_stubs(data.get("artists"), fetcher),
        album=map_album(album_data, fetcher) if isinstance(album_data, dict) else None,
        disc_number=data.get("disc_number"),
        track_number=data.get("track_number"),
        duration_ms=data.get("duration_ms"),
        explicit=bool(data.get("explicit", False)),
        preview_url=data.get("preview_url"),
        is_playable=data.get("is_playable"),
        popularity=data.get("popularity"),
        external_ids=_str_dict(data.get("external_ids")),
        fetcher=fetcher,
    )


def map_playlist(data: dict[str, Any], fetcher: ICatalogFetcher | None = None) -> Playlist:
    """Convert Spotify playlist JSON (full or simplified) to a Playlist."""
    data = _require_object(data, "playlist")
    owner = data.get("owner") if isinstance(data.get("owner"), dict) else {}
    tracks_ref = data.get("tracks") if isinstance(data.get("tracks"), dict) else {}
    return Playlist(
        id=_require_id(data, "Playlist"),
        name=data.get("name") or "",
        href=data.get("href"),
        uri=data.get("uri"),
        external_urls=_str_dict(data.get("external_urls")),
        is_partial=not _has_any(data, _FULL_PLAYLIST_KEYS),
        description=data.get("description"),
        owner_id=owner.get("id"),
        owner_name=owner.get("display_name"),
        public=data.get("public"),
        collaborative=bool(data.get("collaborative", False)),
        snapshot_id=data.get("snapshot_id"),
        total_tracks=tracks_ref.get("total"),
        images=_images(data.get("images")),
        followers=_followers_total(data.get("followers")),
        fetcher=fetcher,
    )


def map_page[T](
    data: dict[str, Any],
    decoder: ItemDecoder[T],
    fetcher: ICatalogFetcher | None = None,
    wrapper_key: str | None = None,
) -> Page[T]:
    """Decode a Spotify paging object with a per-item decoder.

    ``next``/``previous`` are kept as raw URL strings. ``null`` items (Spotify
    sends those for unavailable playlist entries) are skipped here, only bulk
    lookups model them as None.

    ``wrapper_key`` is remembered on the page for envelopes that Spotify nests
    under a category key (search results), so adjacent pages are unwrapped
    the same way.
    """
    data = _require_object(data, "page")
    items = data.get("items")
    if not isinstance(items, list):
        raise DecodeError("Page payload is missing 'items'")
    decoded = [decoder(item, fetcher) for item in items if item is not None]
    return Page(
        items=decoded,
        total=_int_or(data.get("total"), len(decoded)),
        limit=_int_or(data.get("limit"), len(decoded)),
        offset=_int_or(data.get("offset"), 0),
        next=data.get("next"),
        previous=data.get("previous"),
        href=data.get("href"),
        decoder=decoder,
        fetcher=fetcher,
        wrapper_key=wrapper_key,
    )


def _int_or(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def map_bulk[T](
    data: dict[str, Any],
    key: str,
    decoder: Callable[[dict[str, Any], ICatalogFetcher | None], T],
    fetcher: ICatalogFetcher | None = None,
) -> list[T | None]:
    """Decode a bulk lookup response such as ``{"artists": [...]}``.

    Unknown ids come back as ``null`` and stay None at the same position.
    """
    data = _require_object(data, "bulk response")
    entries = data.get(key)
    if not isinstance(entries, list):
        raise DecodeError(f"Bulk response is missing '{key}'")
    return [None if entry is None else decoder(entry, fetcher) for entry in entries]


_SEARCH_CATEGORIES: dict[SearchType, tuple[str, ItemDecoder[Any]]] = {
    SearchType.TRACK: ("tracks", map_track),
    SearchType.ALBUM: ("albums", map_album),
    SearchType.ARTIST: ("artists", map_artist),
    SearchType.PLAYLIST: ("playlists", map_playlist),
}


def map_search_response(
    data: dict[str, Any],
    search_type: SearchType,
    fetcher: ICatalogFetcher | None = None,
) -> SearchResponse:
    """Decode a /search response.

    Only the requested categories are decoded; everything else stays None even
    if Spotify happened to send it.

    Raises:
        DecodeError: If a requested category is missing from the response
    """
    data = _require_object(data, "search response")
    pages: dict[str, Page[Any]] = {}
    for category in search_type.categories:
        key, decoder = _SEARCH_CATEGORIES[category]
        section = data.get(key)
        if not isinstance(section, dict):
            raise DecodeError(f"Search response is missing requested category '{key}'")
        pages[key] = map_page(section, decoder, fetcher, wrapper_key=key)
    return SearchResponse(**pages)


__all__ = [
    "map_album",
    "map_artist",
    "map_bulk",
    "map_image",
    "map_page",
    "map_playlist",
    "map_search_response",
    "map_track",
]

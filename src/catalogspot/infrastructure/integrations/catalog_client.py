"""Spotify Web API catalog client with client-credentials authorization."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, cast
from urllib.parse import quote, urlencode

import httpx

from catalogspot.config.settings import Settings, SpotifySettings
from catalogspot.domain.dtos import ItemDecoder, Page, PageDirection, SearchResponse
from catalogspot.domain.entities import Album, Artist, CatalogEntity, Playlist, Track
from catalogspot.domain.exceptions import (
    CatalogHttpError,
    DecodeError,
    EntityNotFoundException,
    InvalidStateException,
    ValidationError,
)
from catalogspot.domain.ports import ICatalogFetcher
from catalogspot.domain.value_objects import EntityKind, SearchType
from catalogspot.infrastructure.integrations.authorizers import (
    AuthorizationSet,
    Authorizer,
    ClientCredentialsAuthorizer,
)
from catalogspot.infrastructure.integrations.entity_mapper import (
    map_album,
    map_artist,
    map_bulk,
    map_page,
    map_playlist,
    map_search_response,
    map_track,
)

logger = logging.getLogger(__name__)

_MAPPERS: dict[EntityKind, ItemDecoder[CatalogEntity]] = {
    EntityKind.ARTIST: map_artist,
    EntityKind.ALBUM: map_album,
    EntityKind.TRACK: map_track,
    EntityKind.PLAYLIST: map_playlist,
}


class CatalogClient(ICatalogFetcher):
    """HTTP client for Spotify catalog operations.

    Every catalog operation follows the same template: ensure authorization,
    one GET against the API base URL, map the JSON body to entities. No
    retries, no backoff; failures surface to the caller.
    """

    MAX_IDS_PER_REQUEST = 50
    MAX_LIMIT = 50

    # Hey future me, we DON'T create the httpx.AsyncClient here -
    # it's lazy-loaded in get_http_client() so constructing a client outside a running loop is fine.
    # The lock guards token renewal ONLY, catalog requests themselves run concurrently.
    def __init__(
        self,
        authorizer: Authorizer,
        *,
        settings: SpotifySettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the catalog client.

        Args:
            authorizer: Authorizer used for every (re)authorization
            settings: Spotify settings (API/token URLs, timeout); defaults apply if None
            http_client: Transport to use; the client creates (and closes) its own if None
            clock: Returns the current aware datetime; used for token expiry
        """
        self.authorizer = authorizer
        self.settings = settings or SpotifySettings()
        self._client = http_client
        self._owns_client = http_client is None
        self._clock = clock or (lambda: datetime.now(UTC))
        self._authorization_set: AuthorizationSet | None = None
        self._auth_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_client_credentials(
        cls, client_id: str, client_secret: str, **kwargs: Any
    ) -> "CatalogClient":
        """Create a client from a client id and a client secret."""
        return cls(
            ClientCredentialsAuthorizer.from_client_id_and_secret(client_id, client_secret),
            **kwargs,
        )

    @classmethod
    def from_combined_credentials(
        cls, combined_credentials: str, **kwargs: Any
    ) -> "CatalogClient":
        """Create a client from a ``"<client id>:<client secret>"`` string.

        Example:
            client = CatalogClient.from_combined_credentials("MyClientId:MyClientSecret")
        """
        return cls(ClientCredentialsAuthorizer(combined_credentials), **kwargs)

    @classmethod
    def from_settings(
        cls, settings: Settings | SpotifySettings, **kwargs: Any
    ) -> "CatalogClient":
        """Create a client from configured credentials.

        Raises:
            ValidationError: If client id or secret is not configured
        """
        spotify = settings.spotify if isinstance(settings, Settings) else settings
        if not spotify.has_credentials:
            raise ValidationError(
                "Spotify client credentials are not configured. Set "
                "CATALOGSPOT_SPOTIFY__CLIENT_ID and CATALOGSPOT_SPOTIFY__CLIENT_SECRET."
            )
        return cls(
            ClientCredentialsAuthorizer.from_client_id_and_secret(
                spotify.client_id, spotify.client_secret
            ),
            settings=spotify,
            **kwargs,
        )

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def now(self) -> datetime:
        """Current instant according to the client's clock."""
        return self._clock()

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._closed

    async def get_http_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP transport.

        Raises:
            InvalidStateException: If the client has been closed
        """
        if self._closed:
            raise InvalidStateException("CatalogClient has been closed")
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    # Hey, close() matters - an unclosed AsyncClient leaks connections. Prefer "async with".
    # After close, stubs and pages decoded by this client can no longer be upgraded/walked.
    async def close(self) -> None:
        """Close the HTTP transport (if owned) and refuse further requests."""
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "CatalogClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    # =========================================================================
    # AUTHORIZATION
    # =========================================================================

    @property
    def authorization_set(self) -> AuthorizationSet | None:
        """Current authorization, None before the first authorization."""
        return self._authorization_set

    def _needs_authorization(self) -> bool:
        current = self._authorization_set
        return (
            current is None
            or not current.access_token
            or current.expiration_time <= self.now()
        )

    async def authorize(self) -> AuthorizationSet:
        """Force a re-authorization regardless of the current token.

        Prefer ensure_authorized(), which only renews when needed.
        """
        async with self._auth_lock:
            return await self._renew()

    async def ensure_authorized(self) -> bool:
        """Make sure a non-expired token is in place.

        Runs before every catalog request, safe to call redundantly.

        Returns:
            True if an authorization exchange was performed, False otherwise

        Raises:
            AuthenticationError: If the accounts service did not issue a token
        """
        if not self._needs_authorization():
            return False
        # Hey future me - check again under the lock! Concurrent callers racing on an
        # expired token queue up here, the first one renews and everybody else sees
        # the fresh set and returns False. Exactly one token exchange.
        async with self._auth_lock:
            if not self._needs_authorization():
                return False
            await self._renew()
            return True

    async def _renew(self) -> AuthorizationSet:
        http_client = await self.get_http_client()
        authorization_set = await self.authorizer.authorize(self)
        # No await between these two lines: header and set are published together.
        http_client.headers["Authorization"] = self.authorizer.render_auth_header(
            authorization_set
        )
        self._authorization_set = authorization_set
        logger.info(
            f"Authorized with Spotify accounts service, token valid until "
            f"{authorization_set.expiration_time.isoformat()}"
        )
        return authorization_set

    # =========================================================================
    # REQUESTS
    # =========================================================================

    async def _request(
        self,
        endpoint: str,
        params: dict[str, str | int] | None = None,
        *,
        kind: EntityKind | None = None,
        entity_id: str | None = None,
    ) -> dict[str, Any]:
        """Authorized GET against ``<api_base_url>/<endpoint>``."""
        await self.ensure_authorized()
        url = f"{self.settings.api_base_url}/{endpoint}"
        if params:
            # quote (not quote_plus): spaces become %20, commas in id lists stay readable
            url = f"{url}?{urlencode(params, safe=',', quote_via=quote)}"
        return await self._get_json(url, kind=kind, entity_id=entity_id)

    async def _get_json(
        self,
        url: str,
        *,
        kind: EntityKind | None = None,
        entity_id: str | None = None,
    ) -> dict[str, Any]:
        client = await self.get_http_client()
        logger.debug(f"GET {url}")
        response = await client.get(url)

        if response.status_code == 404 and kind is not None:
            raise EntityNotFoundException(kind.label, entity_id, body=response.text, url=url)
        if not response.is_success:
            logger.warning(f"Spotify API request failed ({response.status_code}): {url}")
            raise CatalogHttpError(
                f"Spotify API request failed ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code,
                body=response.text,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Response from {url} is not valid JSON") from e
        if not isinstance(data, dict):
            raise DecodeError(f"Response from {url} is not a JSON object")
        return cast(dict[str, Any], data)

    # =========================================================================
    # GENERIC LOOKUPS
    # =========================================================================

    async def get_by_id(self, kind: EntityKind, entity_id: str) -> CatalogEntity:
        """
        Get a full entity by its Spotify id.

        Args:
            kind: Entity kind (artist, album, track, playlist)
            entity_id: Base-62 Spotify id

        Returns:
            Full entity

        Raises:
            ValidationError: If the id is empty
            EntityNotFoundException: If Spotify answers 404
            CatalogHttpError: For other non-success statuses
        """
        if not entity_id or not entity_id.strip():
            raise ValidationError(f"{kind.label} id must not be empty")
        data = await self._request(
            f"{kind.value}/{quote(entity_id, safe='')}", kind=kind, entity_id=entity_id
        )
        return _MAPPERS[kind](data, self)

    # Hey future me - we do NOT filter out nulls and do
    # NOT truncate to 50! Unknown ids stay None at their position, so result[i] always
    # belongs to ids[i] (duplicates included). Outside 1..50 we fail before any request.
    async def get_bulk(
        self, kind: EntityKind, entity_ids: Iterable[str]
    ) -> list[CatalogEntity | None]:
        """
        Get several entities of one kind in a single request.

        Args:
            kind: Entity kind; playlists have no bulk endpoint
            entity_ids: 1 to 50 Spotify ids

        Returns:
            Entities in input order, None where the id could not be resolved

        Raises:
            ValidationError: If the id count is outside 1..50 or kind has no bulk endpoint
        """
        ids = list(entity_ids)
        bulk_key = kind.bulk_key
        if bulk_key is None:
            raise ValidationError(f"{kind.label} does not support bulk lookups")
        self._validate_id_count(ids, kind)

        data = await self._request(kind.value, {"ids": ",".join(ids)})
        result = map_bulk(data, bulk_key, _MAPPERS[kind], self)
        if len(result) != len(ids):
            raise DecodeError(
                f"Bulk {kind.value} response has {len(result)} entries for {len(ids)} ids"
            )
        return result

    def _validate_id_count(self, ids: list[str], kind: EntityKind) -> None:
        if len(ids) < 1:
            raise ValidationError(f"Bulk {kind.value} lookup requires at least 1 id")
        if len(ids) > self.MAX_IDS_PER_REQUEST:
            raise ValidationError(
                f"Bulk {kind.value} lookup does not allow more than "
                f"{self.MAX_IDS_PER_REQUEST} ids (got {len(ids)})"
            )

    def _validate_paging(self, limit: int, offset: int) -> None:
        if not 1 <= limit <= self.MAX_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {self.MAX_LIMIT} (got {limit})"
            )
        if offset < 0:
            raise ValidationError(f"offset must not be negative (got {offset})")

    # =========================================================================
    # ARTISTS
    # =========================================================================

    async def get_artist(self, artist_id: str) -> Artist:
        """Get a full artist by id."""
        return cast(Artist, await self.get_by_id(EntityKind.ARTIST, artist_id))

    async def get_artists(self, artist_ids: Iterable[str]) -> list[Artist | None]:
        """Get up to 50 artists in one request, None for unknown ids."""
        return cast(list[Artist | None], await self.get_bulk(EntityKind.ARTIST, artist_ids))

    async def get_related_artists(self, artist_id: str) -> list[Artist]:
        """Get artists similar to the given artist (usually 20, no paging)."""
        if not artist_id:
            raise ValidationError("Artist id must not be empty")
        data = await self._request(
            f"artists/{quote(artist_id, safe='')}/related-artists",
            kind=EntityKind.ARTIST,
            entity_id=artist_id,
        )
        return [
            artist
            for artist in map_bulk(data, "artists", map_artist, self)
            if artist is not None
        ]

    # =========================================================================
    # ALBUMS
    # =========================================================================

    async def get_album(self, album_id: str) -> Album:
        """Get a full album by id, including the first page of its tracks."""
        return cast(Album, await self.get_by_id(EntityKind.ALBUM, album_id))

    async def get_albums(self, album_ids: Iterable[str]) -> list[Album | None]:
        """Get up to 50 albums in one request, None for unknown ids."""
        return cast(list[Album | None], await self.get_bulk(EntityKind.ALBUM, album_ids))

    async def get_album_tracks(
        self, album_id: str, limit: int = 20, offset: int = 0
    ) -> Page[Track]:
        """
        Get a page of an album's tracks.

        Args:
            album_id: Spotify album id
            limit: Page size, 1 to 50
            offset: Index of the first track

        Returns:
            Page of track stubs (no album, no popularity)

        Raises:
            ValidationError: If limit is outside 1..50 or offset is negative
        """
        if not album_id:
            raise ValidationError("Album id must not be empty")
        self._validate_paging(limit, offset)
        data = await self._request(
            f"albums/{quote(album_id, safe='')}/tracks",
            {"limit": limit, "offset": offset},
            kind=EntityKind.ALBUM,
            entity_id=album_id,
        )
        return map_page(data, map_track, self)

    # =========================================================================
    # TRACKS & PLAYLISTS
    # =========================================================================

    async def get_track(self, track_id: str) -> Track:
        """Get a full track by id."""
        return cast(Track, await self.get_by_id(EntityKind.TRACK, track_id))

    async def get_tracks(self, track_ids: Iterable[str]) -> list[Track | None]:
        """Get up to 50 tracks in one request, None for unknown ids."""
        return cast(list[Track | None], await self.get_bulk(EntityKind.TRACK, track_ids))

    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Get a full playlist (metadata) by id."""
        return cast(Playlist, await self.get_by_id(EntityKind.PLAYLIST, playlist_id))

    # =========================================================================
    # SEARCH & PAGING
    # =========================================================================

    async def search(
        self,
        query: str,
        search_type: SearchType,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchResponse:
        """
        Search the catalog.

        Args:
            query: Search query, Spotify field filters like ``artist:`` allowed
            search_type: Categories to search, e.g. ``SearchType.TRACK | SearchType.ALBUM``
            limit: Page size per category, 1 to 50
            offset: Index of the first result per category

        Returns:
            SearchResponse with one page per requested category, None for the rest

        Raises:
            ValidationError: If the query or search_type is empty, or limit/offset are out of range
        """
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty")
        type_param = search_type.to_query()
        self._validate_paging(limit, offset)

        data = await self._request(
            "search",
            {"q": query, "type": type_param, "limit": limit, "offset": offset},
        )
        return map_search_response(data, search_type, self)

    async def fetch_page[T](
        self, page: Page[T], direction: PageDirection = PageDirection.NEXT
    ) -> Page[T] | None:
        """
        Follow a page's next/previous cursor.

        Returns:
            The adjacent page, or None if there is no cursor in that direction

        Raises:
            ValidationError: If the cursor points outside the configured API
            InvalidStateException: If the page has no item decoder
        """
        url = page.cursor(direction)
        if url is None:
            return None
        if not url.startswith(f"{self.settings.api_base_url}/"):
            raise ValidationError(f"Paging cursor points outside the Spotify API: {url}")
        if page.decoder is None:
            raise InvalidStateException("Page has no item decoder")

        await self.ensure_authorized()
        data = await self._get_json(url)
        if page.wrapper_key is not None:
            section = data.get(page.wrapper_key)
            if not isinstance(section, dict):
                raise DecodeError(f"Paging response from {url} is missing '{page.wrapper_key}'")
            data = section
        return map_page(data, page.decoder, self, wrapper_key=page.wrapper_key)


def _error_detail(response: httpx.Response) -> str:
    """Spotify error bodies look like {"error": {"status": 400, "message": "..."}}."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return response.text or response.reason_phrase


__all__ = ["CatalogClient"]

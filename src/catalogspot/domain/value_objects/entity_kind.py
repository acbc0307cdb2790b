"""Catalog entity kinds and the endpoints that serve them."""

from enum import Enum


class EntityKind(str, Enum):
    """Kind of catalog entity addressable by id.

    The value is the path segment of the REST resource (``/v1/<value>/<id>``).
    """

    ARTIST = "artists"
    ALBUM = "albums"
    TRACK = "tracks"
    PLAYLIST = "playlists"

    @property
    def label(self) -> str:
        """Human readable name used in error messages."""
        return self.name.capitalize()

    @property
    def bulk_key(self) -> str | None:
        """Top-level key wrapping a bulk lookup response, None if not bulk-capable.

        Spotify has no ``GET /playlists?ids=`` endpoint.
        """
        if self is EntityKind.PLAYLIST:
            return None
        return self.value

    @property
    def supports_bulk(self) -> bool:
        """Check if ``GET /<kind>?ids=`` exists for this kind."""
        return self.bulk_key is not None

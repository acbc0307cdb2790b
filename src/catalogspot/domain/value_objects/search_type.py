"""Search type flags for the /search endpoint.

Hey future me - Spotify's ``type`` query parameter is a comma separated list of
categories. We model it as a Flag so callers can combine categories with ``|``:

    SearchType.TRACK | SearchType.ALBUM  ->  "track,album"

Only the categories present in the flag come back in a SearchResponse, the
others stay None (not an empty page!).
"""

from enum import Flag, auto

from catalogspot.domain.exceptions import ValidationError


class SearchType(Flag):
    """Bitset over the searchable catalog categories."""

    TRACK = auto()
    ALBUM = auto()
    ARTIST = auto()
    PLAYLIST = auto()

    @classmethod
    def all(cls) -> "SearchType":
        """Every searchable category."""
        return cls.TRACK | cls.ALBUM | cls.ARTIST | cls.PLAYLIST

    @property
    def categories(self) -> list["SearchType"]:
        """Single-category members contained in this flag, in declaration order."""
        return [member for member in SearchType if member in self]

    def to_query(self) -> str:
        """Render as the value of Spotify's ``type`` parameter.

        Raises:
            ValidationError: If no category is set
        """
        names = [member.name.lower() for member in self.categories if member.name]
        if not names:
            raise ValidationError("search requires at least one search type")
        return ",".join(names)

    @classmethod
    def from_string(cls, value: str) -> "SearchType":
        """Parse ``"track,album"`` style strings (case-insensitive).

        Raises:
            ValidationError: If the string is empty or names an unknown category
        """
        result = cls(0)
        for part in value.split(","):
            name = part.strip().upper()
            if not name:
                continue
            try:
                result |= cls[name]
            except KeyError as e:
                raise ValidationError(f"Unknown search type: {part.strip()}") from e
        if not result:
            raise ValidationError("search requires at least one search type")
        return result

"""Tests for SearchType and EntityKind."""

import pytest

from catalogspot.domain.exceptions import ValidationError
from catalogspot.domain.value_objects import EntityKind, SearchType


class TestSearchType:
    """Test search type flags."""

    @pytest.mark.parametrize(
        ("search_type", "expected"),
        [
            (SearchType.TRACK, "track"),
            (SearchType.TRACK | SearchType.ALBUM, "track,album"),
            (SearchType.ARTIST | SearchType.TRACK, "track,artist"),
            (SearchType.all(), "track,album,artist,playlist"),
        ],
    )
    def test_to_query(self, search_type: SearchType, expected: str) -> None:
        """Categories render comma separated, in declaration order."""
        assert search_type.to_query() == expected

    def test_to_query_empty(self) -> None:
        """An empty flag is rejected."""
        with pytest.raises(ValidationError):
            SearchType(0).to_query()

    def test_categories(self) -> None:
        """categories lists the single members."""
        assert (SearchType.PLAYLIST | SearchType.ALBUM).categories == [
            SearchType.ALBUM,
            SearchType.PLAYLIST,
        ]

    def test_from_string(self) -> None:
        """Parsing is case-insensitive and tolerates spaces."""
        assert SearchType.from_string("Track, album") == SearchType.TRACK | SearchType.ALBUM

    @pytest.mark.parametrize("value", ["", " , ", "track,show"])
    def test_from_string_invalid(self, value: str) -> None:
        """Empty or unknown categories are rejected."""
        with pytest.raises(ValidationError):
            SearchType.from_string(value)


class TestEntityKind:
    """Test entity kinds."""

    def test_values_are_path_segments(self) -> None:
        """The value is the REST collection name."""
        assert [kind.value for kind in EntityKind] == ["artists", "albums", "tracks", "playlists"]

    def test_label(self) -> None:
        """label is used in error messages."""
        assert EntityKind.ALBUM.label == "Album"

    @pytest.mark.parametrize("kind", [EntityKind.ARTIST, EntityKind.ALBUM, EntityKind.TRACK])
    def test_bulk_capable(self, kind: EntityKind) -> None:
        """Artists, albums and tracks have bulk endpoints keyed by their value."""
        assert kind.supports_bulk
        assert kind.bulk_key == kind.value

    def test_playlist_not_bulk_capable(self) -> None:
        """There is no bulk playlist endpoint."""
        assert EntityKind.PLAYLIST.supports_bulk is False
        assert EntityKind.PLAYLIST.bulk_key is None

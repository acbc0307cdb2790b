"""Value objects for the catalog domain."""

from catalogspot.domain.value_objects.entity_kind import EntityKind
from catalogspot.domain.value_objects.search_type import SearchType

__all__ = ["EntityKind", "SearchType"]

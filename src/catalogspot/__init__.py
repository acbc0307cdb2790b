"""catalogspot - async client for the Spotify Web API catalog.

Usage:
    from catalogspot import CatalogClient, SearchType

    async with CatalogClient.from_client_credentials(client_id, client_secret) as client:
        artist = await client.get_artist("6yhD1KjhLxIETFF7vIRf8B")
        results = await client.search("hello", SearchType.TRACK | SearchType.ALBUM, limit=3)
"""

from catalogspot.domain.dtos import Page, PageDirection, SearchResponse
from catalogspot.domain.entities import Album, Artist, CatalogEntity, Image, Playlist, Track
from catalogspot.domain.exceptions import (
    AuthenticationError,
    CatalogHttpError,
    DecodeError,
    DomainException,
    EntityNotFoundException,
    InvalidStateException,
    NotSupportedError,
    ValidationError,
)
from catalogspot.domain.value_objects import EntityKind, SearchType
from catalogspot.infrastructure.integrations import (
    AuthorizationCodeAuthorizer,
    AuthorizationSet,
    Authorizer,
    AuthorizerKind,
    CatalogClient,
    ClientCredentialsAuthorizer,
    create_authorizer,
)

__version__ = "0.1.0"

__all__ = [
    "Album",
    "Artist",
    "AuthenticationError",
    "AuthorizationCodeAuthorizer",
    "AuthorizationSet",
    "Authorizer",
    "AuthorizerKind",
    "CatalogClient",
    "CatalogEntity",
    "CatalogHttpError",
    "ClientCredentialsAuthorizer",
    "DecodeError",
    "DomainException",
    "EntityKind",
    "EntityNotFoundException",
    "Image",
    "InvalidStateException",
    "NotSupportedError",
    "Page",
    "PageDirection",
    "Playlist",
    "SearchResponse",
    "SearchType",
    "Track",
    "ValidationError",
    "create_authorizer",
]

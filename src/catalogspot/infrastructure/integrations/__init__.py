"""External service integrations."""

from catalogspot.infrastructure.integrations.authorizers import (
    AuthorizationCodeAuthorizer,
    AuthorizationSet,
    Authorizer,
    AuthorizerKind,
    ClientCredentialsAuthorizer,
    create_authorizer,
)
from catalogspot.infrastructure.integrations.catalog_client import CatalogClient

__all__ = [
    "AuthorizationCodeAuthorizer",
    "AuthorizationSet",
    "Authorizer",
    "AuthorizerKind",
    "CatalogClient",
    "ClientCredentialsAuthorizer",
    "create_authorizer",
]

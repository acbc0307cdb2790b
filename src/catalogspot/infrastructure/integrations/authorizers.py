"""Authorizers for Spotify's accounts service.

Hey future me - an Authorizer knows two things:
1. how to get an AuthorizationSet (access token + type + expiry) from the
   accounts service, and
2. how to render that set as the value of the ``Authorization`` header.

It does NOT cache anything. Caching, expiry checks and renewal are the
CatalogClient's job (see CatalogClient.ensure_authorized), the authorizer is
immutable for the client's whole lifetime.

Only the client-credentials grant is implemented. The authorization-code grant
is advertised (AuthorizerKind.AUTHORIZATION_CODE) but fails at construction
time, never on first use.
"""

from __future__ import annotations

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from catalogspot.domain.exceptions import (
    AuthenticationError,
    NotSupportedError,
    ValidationError,
)

if TYPE_CHECKING:
    from catalogspot.infrastructure.integrations.catalog_client import CatalogClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationSet:
    """Result of one successful token exchange.

    Superseded (never updated) by a new instance on re-authorization.
    """

    access_token: str
    token_type: str
    expiration_time: datetime

    @classmethod
    def from_token_response(
        cls, payload: dict[str, Any], issued_at: datetime
    ) -> "AuthorizationSet":
        """Build a set from the token endpoint's JSON body.

        Args:
            payload: Token response with access_token, token_type, expires_in
            issued_at: When the response was received

        Returns:
            AuthorizationSet expiring at ``issued_at + expires_in``

        Raises:
            AuthenticationError: If access_token or expires_in is missing or malformed
        """
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthenticationError("Token response is missing access_token")

        expires_in = payload.get("expires_in")
        # bool is an int subclass, "expires_in": true is still malformed
        if not isinstance(expires_in, int) or isinstance(expires_in, bool):
            raise AuthenticationError("Token response is missing expires_in")

        return cls(
            access_token=access_token,
            token_type=payload.get("token_type") or "Bearer",
            expiration_time=issued_at + timedelta(seconds=expires_in),
        )

    def __repr__(self) -> str:
        # Never leak the token into logs or tracebacks.
        return (
            f"AuthorizationSet(token_type={self.token_type!r}, "
            f"expiration_time={self.expiration_time.isoformat()!r})"
        )


class AuthorizerKind(str, Enum):
    """OAuth2 grant used by an authorizer."""

    CLIENT_CREDENTIALS = "client_credentials"
    AUTHORIZATION_CODE = "authorization_code"


class Authorizer(ABC):
    """Obtains AuthorizationSets and renders them as request headers."""

    kind: AuthorizerKind

    @abstractmethod
    async def authorize(self, client: CatalogClient) -> AuthorizationSet:
        """Run a token exchange against the accounts service.

        Args:
            client: Client whose HTTP transport, token URL and clock are used

        Raises:
            AuthenticationError: If no usable token was issued
        """
        pass

    def render_auth_header(self, authorization_set: AuthorizationSet) -> str:
        """Value for the ``Authorization`` header of catalog requests."""
        return f"{authorization_set.token_type} {authorization_set.access_token}"


class ClientCredentialsAuthorizer(Authorizer):
    """Client-credentials grant: authenticates the application, not a user.

    The combined ``"<client id>:<client secret>"`` string is sent base64-encoded
    as ``Authorization: Basic ...`` on the token request. Beyond presence,
    nothing is validated here; bad credentials surface as an
    AuthenticationError from the accounts service.
    """

    kind = AuthorizerKind.CLIENT_CREDENTIALS

    def __init__(self, combined_credentials: str) -> None:
        """
        Initialize the authorizer.

        Args:
            combined_credentials: ``"<client id>:<client secret>"``

        Raises:
            ValidationError: If the credentials are empty
        """
        if not combined_credentials or not combined_credentials.strip():
            raise ValidationError("Client credentials must not be empty")
        self._encoded_credentials = base64.b64encode(
            combined_credentials.encode("utf-8")
        ).decode("ascii")

    @classmethod
    def from_client_id_and_secret(
        cls, client_id: str, client_secret: str
    ) -> "ClientCredentialsAuthorizer":
        """Create an authorizer from a separate client id and secret."""
        if not client_id or not client_secret:
            raise ValidationError("Client id and client secret must not be empty")
        return cls(f"{client_id}:{client_secret}")

    @property
    def encoded_credentials(self) -> str:
        """Base64 of the combined credential string."""
        return self._encoded_credentials

    @staticmethod
    def decode_credentials(encoded_credentials: str) -> tuple[str, str]:
        """Split base64 combined credentials back into (client id, client secret).

        Splits on the first colon, so a secret may contain colons but a client
        id may not.

        Raises:
            ValidationError: If the value is not base64 or has no colon
        """
        try:
            combined = base64.b64decode(encoded_credentials, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValidationError("Encoded credentials are not valid base64") from e
        client_id, sep, client_secret = combined.partition(":")
        if not sep:
            raise ValidationError("Encoded credentials have no ':' separator")
        return client_id, client_secret

    async def authorize(self, client: CatalogClient) -> AuthorizationSet:
        """Exchange the client credentials for an access token."""
        http_client = await client.get_http_client()
        token_url = client.settings.token_url

        try:
            response = await http_client.post(
                token_url,
                data={"grant_type": "client_credentials"},
                headers={
                    "Authorization": f"Basic {self._encoded_credentials}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"Spotify accounts service unreachable: {e!s}")
            raise AuthenticationError(
                f"Spotify accounts service unreachable: {e!s}"
            ) from e

        issued_at = client.now()

        if not response.is_success:
            error_code, description = _parse_oauth_error(response)
            logger.warning(
                f"Token request rejected with {response.status_code}: {error_code or 'no error code'}"
            )
            raise AuthenticationError(
                message=f"Spotify rejected the token request ({response.status_code}): {description}",
                error_code=error_code,
                http_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthenticationError(
                "Token response is not valid JSON", http_status=response.status_code
            ) from e
        if not isinstance(payload, dict):
            raise AuthenticationError(
                "Token response is not a JSON object", http_status=response.status_code
            )

        return AuthorizationSet.from_token_response(payload, issued_at)

    def __repr__(self) -> str:
        return "ClientCredentialsAuthorizer(<redacted>)"


class AuthorizationCodeAuthorizer(Authorizer):
    """Authorization-code grant (user login). Not implemented.

    Construction raises NotSupportedError so the gap shows up where the
    client is wired together, not on the first request.
    """

    kind = AuthorizerKind.AUTHORIZATION_CODE

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        raise NotSupportedError(
            "The authorization code flow is not implemented; "
            "use ClientCredentialsAuthorizer instead."
        )

    async def authorize(self, client: CatalogClient) -> AuthorizationSet:  # pragma: no cover
        raise NotSupportedError("The authorization code flow is not implemented.")


def create_authorizer(kind: AuthorizerKind, **credentials: str) -> Authorizer:
    """Build the authorizer for a grant type.

    Args:
        kind: Grant type
        **credentials: ``combined_credentials`` or ``client_id`` + ``client_secret``

    Raises:
        NotSupportedError: For AUTHORIZATION_CODE
        ValidationError: If credentials are missing
    """
    match kind:
        case AuthorizerKind.CLIENT_CREDENTIALS:
            combined = credentials.get("combined_credentials")
            if combined is not None:
                return ClientCredentialsAuthorizer(combined)
            return ClientCredentialsAuthorizer.from_client_id_and_secret(
                credentials.get("client_id", ""), credentials.get("client_secret", "")
            )
        case AuthorizerKind.AUTHORIZATION_CODE:
            return AuthorizationCodeAuthorizer(**credentials)
    raise NotSupportedError(f"Unknown authorizer kind: {kind!r}")


def _parse_oauth_error(response: httpx.Response) -> tuple[str | None, str]:
    """Pull ``error`` and ``error_description`` out of an OAuth error body."""
    try:
        data = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase
    if not isinstance(data, dict):
        return None, response.text or response.reason_phrase
    error_code = data.get("error")
    description = data.get("error_description") or error_code or response.reason_phrase
    return (error_code if isinstance(error_code, str) else None), str(description)


__all__ = [
    "AuthorizationCodeAuthorizer",
    "AuthorizationSet",
    "Authorizer",
    "AuthorizerKind",
    "ClientCredentialsAuthorizer",
    "create_authorizer",
]

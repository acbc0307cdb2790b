"""Tests for authorizers and AuthorizationSet."""

import base64
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from catalogspot.domain.exceptions import (
    AuthenticationError,
    NotSupportedError,
    ValidationError,
)
from catalogspot.infrastructure.integrations.authorizers import (
    AuthorizationCodeAuthorizer,
    AuthorizationSet,
    AuthorizerKind,
    ClientCredentialsAuthorizer,
    create_authorizer,
)
from catalogspot.infrastructure.integrations.catalog_client import CatalogClient

ISSUED_AT = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class TestAuthorizationSet:
    """Test building AuthorizationSets from token responses."""

    def test_expiration_is_issue_time_plus_expires_in(self) -> None:
        """expiration_time = issued_at + expires_in."""
        auth_set = AuthorizationSet.from_token_response(
            {"access_token": "abc", "token_type": "Bearer", "expires_in": 3600}, ISSUED_AT
        )
        assert auth_set.access_token == "abc"
        assert auth_set.token_type == "Bearer"
        assert auth_set.expiration_time == ISSUED_AT + timedelta(hours=1)

    def test_token_type_defaults_to_bearer(self) -> None:
        """Missing token_type falls back to Bearer."""
        auth_set = AuthorizationSet.from_token_response(
            {"access_token": "abc", "expires_in": 60}, ISSUED_AT
        )
        assert auth_set.token_type == "Bearer"

    @pytest.mark.parametrize(
        "payload",
        [
            {"token_type": "Bearer", "expires_in": 3600},
            {"access_token": "", "expires_in": 3600},
            {"access_token": "abc", "token_type": "Bearer"},
            {"access_token": "abc", "expires_in": "3600"},
            {"access_token": "abc", "expires_in": True},
        ],
    )
    def test_malformed_payload_raises(self, payload: dict) -> None:
        """Missing access_token/expires_in is an AuthenticationError."""
        with pytest.raises(AuthenticationError):
            AuthorizationSet.from_token_response(payload, ISSUED_AT)

    def test_repr_hides_token(self) -> None:
        """The access token never shows up in repr."""
        auth_set = AuthorizationSet.from_token_response(
            {"access_token": "super-secret", "expires_in": 60}, ISSUED_AT
        )
        assert "super-secret" not in repr(auth_set)

    def test_is_immutable(self) -> None:
        """AuthorizationSet cannot be mutated."""
        auth_set = AuthorizationSet("abc", "Bearer", ISSUED_AT)
        with pytest.raises(AttributeError):
            auth_set.access_token = "other"  # type: ignore[misc]


class TestClientCredentialsAuthorizer:
    """Test client-credentials authorizer construction and header rendering."""

    def test_encodes_combined_credentials(self) -> None:
        """The combined string is sent base64-encoded."""
        authorizer = ClientCredentialsAuthorizer("my-id:my-secret")
        assert authorizer.encoded_credentials == base64.b64encode(b"my-id:my-secret").decode()

    def test_from_id_and_secret_joins_with_colon(self) -> None:
        """Separate id and secret produce the same encoding as the combined form."""
        combined = ClientCredentialsAuthorizer("my-id:my-secret")
        separate = ClientCredentialsAuthorizer.from_client_id_and_secret("my-id", "my-secret")
        assert combined.encoded_credentials == separate.encoded_credentials

    @pytest.mark.parametrize(
        ("client_id", "client_secret"),
        [
            ("abc", "def"),
            ("5fe01282e94241328a84e7c5cc169164", "0123456789abcdef0123456789abcdef"),
            ("ünïcode", "sécret with spaces"),
            ("id", "secret:with:colons"),
        ],
    )
    def test_credentials_round_trip(self, client_id: str, client_secret: str) -> None:
        """Encoding id+secret and decoding it back yields the original pair."""
        authorizer = ClientCredentialsAuthorizer.from_client_id_and_secret(
            client_id, client_secret
        )
        decoded = ClientCredentialsAuthorizer.decode_credentials(
            authorizer.encoded_credentials
        )
        assert decoded == (client_id, client_secret)

    def test_decode_rejects_garbage(self) -> None:
        """Non-base64 input is a ValidationError."""
        with pytest.raises(ValidationError):
            ClientCredentialsAuthorizer.decode_credentials("not base64!!")

    def test_decode_rejects_missing_separator(self) -> None:
        """Decoded value without a colon is a ValidationError."""
        encoded = base64.b64encode(b"no-separator").decode()
        with pytest.raises(ValidationError):
            ClientCredentialsAuthorizer.decode_credentials(encoded)

    @pytest.mark.parametrize("combined", ["", "   "])
    def test_empty_credentials_rejected(self, combined: str) -> None:
        """Presence is the only thing validated."""
        with pytest.raises(ValidationError):
            ClientCredentialsAuthorizer(combined)

    def test_malformed_but_present_credentials_accepted(self) -> None:
        """No content validation beyond presence."""
        authorizer = ClientCredentialsAuthorizer("no colon at all")
        assert authorizer.kind == AuthorizerKind.CLIENT_CREDENTIALS

    def test_render_auth_header(self) -> None:
        """Header is '<token type> <access token>'."""
        authorizer = ClientCredentialsAuthorizer("id:secret")
        auth_set = AuthorizationSet("abc123", "Bearer", ISSUED_AT)
        assert authorizer.render_auth_header(auth_set) == "Bearer abc123"

    def test_repr_hides_credentials(self) -> None:
        """Credentials are not part of repr."""
        authorizer = ClientCredentialsAuthorizer("my-id:my-secret")
        assert "my-secret" not in repr(authorizer)
        assert authorizer.encoded_credentials not in repr(authorizer)


class TestAuthorizationCodeAuthorizer:
    """The authorization-code variant fails fast."""

    def test_construction_raises_not_supported(self) -> None:
        """Construction fails immediately, not on first use."""
        with pytest.raises(NotSupportedError):
            AuthorizationCodeAuthorizer()

    def test_construction_with_arguments_raises_not_supported(self) -> None:
        """Arguments don't matter."""
        with pytest.raises(NotSupportedError):
            AuthorizationCodeAuthorizer("client-id", redirect_uri="http://localhost/callback")


class TestCreateAuthorizer:
    """Test the tagged authorizer factory."""

    def test_client_credentials_from_combined(self) -> None:
        """combined_credentials selects the combined constructor."""
        authorizer = create_authorizer(
            AuthorizerKind.CLIENT_CREDENTIALS, combined_credentials="id:secret"
        )
        assert isinstance(authorizer, ClientCredentialsAuthorizer)

    def test_client_credentials_from_id_and_secret(self) -> None:
        """client_id + client_secret are joined."""
        authorizer = create_authorizer(
            AuthorizerKind.CLIENT_CREDENTIALS, client_id="id", client_secret="secret"
        )
        assert isinstance(authorizer, ClientCredentialsAuthorizer)
        assert ClientCredentialsAuthorizer.decode_credentials(
            authorizer.encoded_credentials
        ) == ("id", "secret")

    def test_client_credentials_missing_secret(self) -> None:
        """Missing secret is a ValidationError."""
        with pytest.raises(ValidationError):
            create_authorizer(AuthorizerKind.CLIENT_CREDENTIALS, client_id="id")

    def test_authorization_code_not_supported(self) -> None:
        """The unimplemented arm raises NotSupportedError."""
        with pytest.raises(NotSupportedError):
            create_authorizer(AuthorizerKind.AUTHORIZATION_CODE)


class TestClientCredentialsExchange:
    """Test the token exchange against the fake accounts service."""

    async def test_token_request_shape(self, catalog_client: CatalogClient, fake_api) -> None:
        """POST with grant_type=client_credentials and Basic auth."""
        auth_set = await catalog_client.authorizer.authorize(catalog_client)

        assert len(fake_api.token_requests) == 1
        request = fake_api.token_requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://accounts.spotify.com/api/token"
        assert request.content == b"grant_type=client_credentials"
        expected = base64.b64encode(b"test-id:test-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert auth_set.access_token == "token-1"

    async def test_expiry_uses_client_clock(
        self, catalog_client: CatalogClient, fake_api, clock
    ) -> None:
        """Issue time comes from the client's clock."""
        fake_api.expires_in = 120
        auth_set = await catalog_client.authorizer.authorize(catalog_client)
        assert auth_set.expiration_time == clock() + timedelta(seconds=120)

    async def test_rejected_credentials(self, catalog_client: CatalogClient, fake_api) -> None:
        """Non-success status carries http_status and OAuth error code."""
        fake_api.token_status = 400
        fake_api.token_body = {
            "error": "invalid_client",
            "error_description": "Invalid client secret",
        }

        with pytest.raises(AuthenticationError) as exc_info:
            await catalog_client.authorizer.authorize(catalog_client)

        assert exc_info.value.http_status == 400
        assert exc_info.value.error_code == "invalid_client"
        assert exc_info.value.is_credential_problem
        assert "Invalid client secret" in exc_info.value.message

    async def test_missing_expires_in(self, catalog_client: CatalogClient, fake_api) -> None:
        """Malformed token payload is an AuthenticationError."""
        fake_api.token_body = {"access_token": "abc", "token_type": "Bearer"}

        with pytest.raises(AuthenticationError):
            await catalog_client.authorizer.authorize(catalog_client)

    async def test_unreachable_accounts_service(self, clock) -> None:
        """Transport errors become AuthenticationError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("All connection attempts failed", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
            client = CatalogClient.from_combined_credentials(
                "id:secret", http_client=http_client, clock=clock
            )
            with pytest.raises(AuthenticationError) as exc_info:
                await client.authorizer.authorize(client)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_non_json_token_response(self, clock) -> None:
        """A 200 with a non-JSON body is an AuthenticationError."""

        def garbage(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(garbage)) as http_client:
            client = CatalogClient.from_combined_credentials(
                "id:secret", http_client=http_client, clock=clock
            )
            with pytest.raises(AuthenticationError):
                await client.authorizer.authorize(client)

"""
Data models for OAuth 1.0a signing and the three-legged token exchange.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import OAuthError


@dataclass(frozen=True)
class ConsumerCredential:
    """
    Identifies the calling application.

    Attributes:
        consumer_key: OAuth consumer key issued by the provider
        consumer_secret: OAuth consumer secret issued by the provider
        callback_uri: Where the provider redirects after user authorization
    """
    consumer_key: str
    consumer_secret: str
    callback_uri: str = ""


@dataclass(frozen=True)
class AccessToken:
    """
    Durable token/secret pair obtained from the access-token leg.

    Attributes:
        token: Value sent as oauth_token
        secret: Token secret, the second half of the signing key
        scopes: Scopes the token was granted for
    """
    token: str
    secret: str
    scopes: tuple[str, ...] = ()


@dataclass
class SigningOptions:
    """
    Per-call overrides for the signature engine.

    Attributes:
        token: Token to sign with instead of the stored access token
        token_secret: Secret paired with `token`; an empty string is a
            valid secret
        consumer_only: Sign with consumer credentials only, ignoring the
            stored and configured access tokens
        extra_oauth_params: Additional OAuth parameters (e.g. oauth_verifier),
            emitted verbatim after oauth_token
        use_raw_transport: Return the raw transport response instead of the
            decoded JSON payload
        verify_scopes: Check the access token against configured scopes
            before the call
    """
    token: str | None = None
    token_secret: str | None = None
    consumer_only: bool = False
    extra_oauth_params: list[tuple[str, str]] = field(default_factory=list)
    use_raw_transport: bool = False
    verify_scopes: bool = True


@dataclass
class SignatureContext:
    """
    Everything needed to sign and send one request. Never persisted.

    Attributes:
        method: HTTP method (GET, POST, ...)
        path: Path under the prefix, e.g. "user/info"
        hostname: Host override, default is the configured API host
        path_prefix: Prefix override, default is the configured prefix
        query: Non-OAuth query parameters, in iteration order
        headers: Extra request headers
        options: Signing overrides
    """
    method: str | None = None
    path: str | None = None
    hostname: str | None = None
    path_prefix: str | None = None
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    options: SigningOptions = field(default_factory=SigningOptions)


@dataclass
class TransportRequest:
    """A fully resolved request handed to the transport."""
    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class TransportResponse:
    """
    What the transport returns.

    Attributes:
        status_code: HTTP status
        headers: Response headers (lowercase keys)
        body: Decoded response body
    """
    status_code: int
    headers: dict[str, str]
    body: str


@dataclass
class User:
    """Wraps the `user` object of the user/info response."""
    json: dict[str, Any]

    @property
    def name(self) -> str | None:
        return self.json.get("name")

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> User:
        return cls(json=data.get("user") or {})


@dataclass
class AuthorizationUrlResult:
    """
    Result of the request-token leg.

    Attributes:
        url: Authorization URL to send the user to
        request_token: The issued request token
        error: Error if the leg failed
    """
    url: str | None = None
    request_token: str | None = None
    error: OAuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AccessTokenResult:
    """
    Result of the access-token leg and the identity check that follows it.

    Attributes:
        access_token: The new token, installed in the session on success
        user: Name resolved by the identity check
        error: Error if the exchange itself failed
        identity_error: Error if only the identity check failed; the access
            token is still installed in that case
    """
    access_token: AccessToken | None = None
    user: str | None = None
    error: OAuthError | None = None
    identity_error: OAuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

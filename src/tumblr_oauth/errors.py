"""
Error taxonomy for OAuth 1.0a signing and token exchange.
"""


class OAuthError(Exception):
    """Base class for every error raised or reported by tumblr_oauth."""


class SigningError(OAuthError, ValueError):
    """A request could not be signed because the caller supplied too little."""


class MissingCredential(SigningError):
    """Consumer key or consumer secret is absent."""


class MissingMethod(SigningError):
    """No HTTP method on the signature context."""


class MissingTarget(SigningError):
    """No path could be resolved for the signature context."""


class TransportError(OAuthError):
    """
    The transport failed or the provider answered with an error status.

    Attributes:
        status_code: HTTP status if a response was received, else None
        body: Response body if a response was received, else None
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProtocolParseError(OAuthError):
    """A url-encoded provider body or callback is missing expected fields."""


class NoCallbackData(OAuthError):
    """The callback URL carried no query parameters at all."""


class FlowStateError(OAuthError):
    """An operation was attempted in a state the exchange flow cannot leave."""


class ScopeError(OAuthError):
    """No usable access token, or the token lacks the configured scopes."""

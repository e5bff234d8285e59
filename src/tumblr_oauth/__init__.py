"""
Tumblr OAuth 1.0a client

Obtain request and access tokens through the three-legged exchange and sign
every API call with an HMAC-SHA1 Authorization header.
"""

from .client import TumblrClient
from .config import TumblrConfig
from .errors import (
    FlowStateError,
    MissingCredential,
    MissingMethod,
    MissingTarget,
    NoCallbackData,
    OAuthError,
    ProtocolParseError,
    ScopeError,
    SigningError,
    TransportError,
)
from .flow import FlowState, OAuthFlow, parse_callback_url
from .middleware.wsgi import OAuthCallbackWSGIMiddleware
from .models import (
    AccessToken,
    AccessTokenResult,
    AuthorizationUrlResult,
    ConsumerCredential,
    SignatureContext,
    SigningOptions,
    TransportResponse,
    User,
)
from .ratelimit import get_remaining_requests
from .session import OAuthSession
from .signature import parse_authorization_header, sign
from .transport import HttpxTransport

__version__ = "0.1.0"

__all__ = [
    "AccessToken",
    "AccessTokenResult",
    "AuthorizationUrlResult",
    "ConsumerCredential",
    "FlowState",
    "FlowStateError",
    "HttpxTransport",
    "MissingCredential",
    "MissingMethod",
    "MissingTarget",
    "NoCallbackData",
    "OAuthError",
    "OAuthCallbackWSGIMiddleware",
    "OAuthFlow",
    "OAuthSession",
    "ProtocolParseError",
    "ScopeError",
    "SignatureContext",
    "SigningError",
    "SigningOptions",
    "TransportError",
    "TransportResponse",
    "TumblrClient",
    "TumblrConfig",
    "User",
    "get_remaining_requests",
    "parse_authorization_header",
    "parse_callback_url",
    "sign",
]

# Middleware imports - optional, require framework dependencies
try:
    from .middleware.asgi import OAuthCallbackASGIMiddleware
    __all__.append("OAuthCallbackASGIMiddleware")
except ImportError:
    pass

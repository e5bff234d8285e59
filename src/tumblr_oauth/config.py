"""
Configuration for the Tumblr OAuth client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .models import ConsumerCredential

DEFAULT_API_HOSTNAME = "api.tumblr.com"
DEFAULT_PATH_PREFIX = "/v2/"
DEFAULT_OAUTH_HOSTNAME = "www.tumblr.com"
DEFAULT_REQUEST_TOKEN_PATH = "/oauth/request_token"
DEFAULT_ACCESS_TOKEN_PATH = "/oauth/access_token"
DEFAULT_AUTHORIZE_URL = "https://www.tumblr.com/oauth/authorize"

# Budget assumed before the first response carries rate-limit headers
DEFAULT_REMAINING_REQUESTS = 5000


@dataclass(frozen=True)
class TumblrConfig:
    """
    Long-lived client configuration.

    Args:
        consumer_key: OAuth consumer key
        consumer_secret: OAuth consumer secret
        callback_uri: Redirect target after user authorization
        access_token: Optional pre-provisioned access token
        access_token_secret: Secret paired with `access_token`
        scopes: Scopes an access token must carry for ordinary calls
        hostname: API host. Default: api.tumblr.com
        path_prefix: API path prefix. Default: /v2/
        oauth_hostname: Host serving the OAuth endpoints
        request_token_path: Path of the request-token endpoint
        access_token_path: Path of the access-token endpoint
        authorize_url: User-facing authorization page
        timeout_s: Transport timeout in seconds. Default: 10.0

    Example:
        >>> config = TumblrConfig(consumer_key="ck", consumer_secret="cs")
        >>> config.consumer_credential().consumer_key
        'ck'
    """
    consumer_key: str
    consumer_secret: str
    callback_uri: str = ""
    access_token: str | None = None
    access_token_secret: str | None = None
    scopes: tuple[str, ...] = ()
    hostname: str = DEFAULT_API_HOSTNAME
    path_prefix: str = DEFAULT_PATH_PREFIX
    oauth_hostname: str = DEFAULT_OAUTH_HOSTNAME
    request_token_path: str = DEFAULT_REQUEST_TOKEN_PATH
    access_token_path: str = DEFAULT_ACCESS_TOKEN_PATH
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    timeout_s: float = 10.0
    default_remaining_requests: int = DEFAULT_REMAINING_REQUESTS

    @classmethod
    def from_env(cls) -> TumblrConfig:
        """Build a config from TUMBLR_* environment variables."""
        scopes = os.getenv("TUMBLR_SCOPES", "")
        return cls(
            consumer_key=os.getenv("TUMBLR_CONSUMER_KEY", ""),
            consumer_secret=os.getenv("TUMBLR_CONSUMER_SECRET", ""),
            callback_uri=os.getenv("TUMBLR_CALLBACK_URI", ""),
            access_token=os.getenv("TUMBLR_ACCESS_TOKEN") or None,
            access_token_secret=os.getenv("TUMBLR_ACCESS_TOKEN_SECRET") or None,
            scopes=tuple(s.strip() for s in scopes.split(",") if s.strip()),
            timeout_s=float(os.getenv("TUMBLR_TIMEOUT_S", "10.0")),
        )

    def consumer_credential(self) -> ConsumerCredential:
        return ConsumerCredential(
            consumer_key=self.consumer_key,
            consumer_secret=self.consumer_secret,
            callback_uri=self.callback_uri,
        )

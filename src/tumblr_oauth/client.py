"""
Signed API client for Tumblr.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .config import TumblrConfig
from .errors import ProtocolParseError, ScopeError
from .flow import OAuthFlow
from .models import (
    AccessToken,
    SignatureContext,
    SigningOptions,
    TransportRequest,
    TransportResponse,
    User,
)
from .ratelimit import PER_DAY_HEADER, PER_HOUR_HEADER, get_remaining_requests
from .session import OAuthSession
from .signature import resolve_url, sign
from .transport import HttpxTransport


logger = logging.getLogger(__name__)


class TumblrClient:
    """
    Signs every request with OAuth 1.0a and sends it through a transport.

    Args:
        config: Client configuration
        session: Credential state. A new one is created from config if omitted
        transport: Object with `send` and `send_sync`. Default: HttpxTransport

    Example:
        >>> client = TumblrClient(TumblrConfig.from_env())
        >>> result = await client.flow().get_authorization_url()
        >>> print(result.url)
    """

    def __init__(
        self,
        config: TumblrConfig,
        session: OAuthSession | None = None,
        transport: Any = None,
    ):
        self.config = config
        self.session = session or OAuthSession(config.consumer_credential())
        self.transport = transport or HttpxTransport(timeout_s=config.timeout_s)
        self.remaining_requests = config.default_remaining_requests

    def flow(self) -> OAuthFlow:
        """Start a new authorization attempt bound to this client's session."""
        return OAuthFlow(self)

    def authorization_header(self, context: SignatureContext) -> str:
        return sign(
            context,
            self.session.credential,
            self.session.get_access_token(),
            self.config,
        )

    def verify_scopes(self) -> None:
        """
        Check that an access token is available and carries the configured scopes.

        Raises:
            ScopeError: If not
        """
        token = self.session.get_access_token()
        if token is None and self.config.access_token:
            token = AccessToken(
                token=self.config.access_token,
                secret=self.config.access_token_secret or "",
                scopes=self.config.scopes,
            )
        if token is None:
            raise ScopeError("No access token available")

        missing = [s for s in self.config.scopes if s not in token.scopes]
        if missing:
            raise ScopeError(f"Access token lacks scopes: {', '.join(missing)}")

    def prepare_request(self, context: SignatureContext) -> TransportRequest:
        """
        Sign a context and resolve it into a transport request.

        Raises:
            ScopeError: If scope verification is on and fails
            SigningError: If the context cannot be signed
        """
        if context.options.verify_scopes:
            self.verify_scopes()

        headers = dict(context.headers)
        headers["Authorization"] = self.authorization_header(context)
        url = resolve_url(context, self.config)
        logger.debug("Signed %s %s", context.method, url)

        return TransportRequest(
            method=context.method.upper(),
            url=url,
            headers=headers,
            params=dict(context.query),
        )

    async def request(self, context: SignatureContext) -> Any:
        """
        Send a signed request.

        Returns:
            The raw TransportResponse when `use_raw_transport` is set,
            otherwise the `response` member of the JSON body
        """
        prepared = self.prepare_request(context)
        response = await self.transport.send(prepared)
        return self._handle_response(context, response)

    def request_sync(self, context: SignatureContext) -> Any:
        """Synchronous variant of `request`."""
        prepared = self.prepare_request(context)
        response = self.transport.send_sync(prepared)
        return self._handle_response(context, response)

    async def me(
        self,
        verify_scopes: bool = True,
        access_token: AccessToken | None = None,
    ) -> User:
        """
        Fetch the authenticated user's profile.

        Args:
            verify_scopes: Check the stored token's scopes first
            access_token: Sign with this token instead of reading the
                session, so the call cannot pick up a token another caller
                installed in the meantime
        """
        data = await self.request(self._me_context(verify_scopes, access_token))
        return User.from_response(data or {})

    def me_sync(
        self,
        verify_scopes: bool = True,
        access_token: AccessToken | None = None,
    ) -> User:
        data = self.request_sync(self._me_context(verify_scopes, access_token))
        return User.from_response(data or {})

    @staticmethod
    def get_remaining_requests(response: TransportResponse) -> int:
        return get_remaining_requests(response.headers)

    def _me_context(
        self,
        verify_scopes: bool,
        access_token: AccessToken | None,
    ) -> SignatureContext:
        options = SigningOptions(verify_scopes=verify_scopes)
        if access_token is not None:
            options.token = access_token.token
            options.token_secret = access_token.secret
        return SignatureContext(method="GET", path="user/info", options=options)

    def _handle_response(self, context: SignatureContext, response: TransportResponse) -> Any:
        if PER_HOUR_HEADER in response.headers or PER_DAY_HEADER in response.headers:
            self.remaining_requests = self.get_remaining_requests(response)

        if context.options.use_raw_transport:
            return response

        try:
            data = json.loads(response.body)
        except ValueError as e:
            raise ProtocolParseError(f"Invalid JSON response: {response.status_code}") from e

        if not isinstance(data, dict):
            raise ProtocolParseError("JSON response is not an object")
        return data.get("response")

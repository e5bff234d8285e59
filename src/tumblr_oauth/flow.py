"""
Three-legged OAuth 1.0a token exchange.

    UNAUTHENTICATED -> REQUEST_TOKEN_REQUESTED -> AWAITING_USER_AUTHORIZATION
        -> ACCESS_TOKEN_REQUESTED -> AUTHENTICATED

FAILED is reachable from every non-terminal state. A flow may also start
directly at the access-token leg: the session's pending map, not the flow
object, links the two legs, since a web app usually receives the callback on
another request than the one that issued the request token.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit

from .errors import (
    FlowStateError,
    NoCallbackData,
    OAuthError,
    ProtocolParseError,
    TransportError,
)
from .models import (
    AccessToken,
    AccessTokenResult,
    AuthorizationUrlResult,
    SignatureContext,
    SigningOptions,
    TransportResponse,
)

if TYPE_CHECKING:
    from .client import TumblrClient

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    REQUEST_TOKEN_REQUESTED = "request_token_requested"
    AWAITING_USER_AUTHORIZATION = "awaiting_user_authorization"
    ACCESS_TOKEN_REQUESTED = "access_token_requested"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


_TRANSITIONS: dict[FlowState, frozenset[FlowState]] = {
    FlowState.UNAUTHENTICATED: frozenset({
        FlowState.REQUEST_TOKEN_REQUESTED,
        FlowState.ACCESS_TOKEN_REQUESTED,
        FlowState.FAILED,
    }),
    FlowState.REQUEST_TOKEN_REQUESTED: frozenset({
        FlowState.AWAITING_USER_AUTHORIZATION,
        FlowState.FAILED,
    }),
    FlowState.AWAITING_USER_AUTHORIZATION: frozenset({
        FlowState.ACCESS_TOKEN_REQUESTED,
        FlowState.FAILED,
    }),
    FlowState.ACCESS_TOKEN_REQUESTED: frozenset({
        FlowState.AUTHENTICATED,
        FlowState.FAILED,
    }),
    FlowState.AUTHENTICATED: frozenset(),
    FlowState.FAILED: frozenset(),
}


def _as_oauth_error(error: Exception) -> OAuthError:
    if isinstance(error, OAuthError):
        return error
    wrapped = TransportError(f"Request failed: {error}")
    wrapped.__cause__ = error
    return wrapped


def parse_callback_url(url: str) -> dict[str, str]:
    """
    Extract the query parameters of an OAuth callback URL.

    Raises:
        NoCallbackData: If the URL has no query parameters at all
        ProtocolParseError: If the URL is malformed, or parameters are
            present but oauth_token is not

    Examples:
        >>> parse_callback_url("https://example.com/cb?oauth_token=t&oauth_verifier=v")
        {'oauth_token': 't', 'oauth_verifier': 'v'}
    """
    try:
        query = urlsplit(url).query
    except ValueError as e:
        raise ProtocolParseError(f"Invalid callback URL: {e}") from e

    params = dict(parse_qsl(query, keep_blank_values=True))
    if not params:
        raise NoCallbackData("Callback URL carries no query parameters")
    if not params.get("oauth_token"):
        raise ProtocolParseError("Callback is missing oauth_token")
    return params


def parse_token_response(body: str) -> tuple[str, str]:
    """
    Read oauth_token and oauth_token_secret from a url-encoded body.

    Raises:
        ProtocolParseError: If either field is missing
    """
    fields = dict(parse_qsl(body or "", keep_blank_values=True))
    token = fields.get("oauth_token")
    secret = fields.get("oauth_token_secret")
    if not token or secret is None:
        raise ProtocolParseError("Response is missing oauth_token or oauth_token_secret")
    return token, secret


class OAuthFlow:
    """
    One authorization attempt. Errors never escape the public methods; they
    are reported in the `error` field of the returned result. Failures that
    are not OAuthErrors are reported as TransportError.

    Args:
        client: Client whose session and transport the flow uses
    """

    def __init__(self, client: TumblrClient):
        self.client = client
        self.session = client.session
        self.config = client.config
        self.state = FlowState.UNAUTHENTICATED

    async def get_authorization_url(self) -> AuthorizationUrlResult:
        """Obtain a request token and build the user-facing authorization URL."""
        try:
            self._transition(FlowState.REQUEST_TOKEN_REQUESTED)
        except FlowStateError as e:
            return AuthorizationUrlResult(error=e)

        try:
            response = await self.client.request(self._request_token_context())
            return self._finish_request_token(response)
        except Exception as e:
            return AuthorizationUrlResult(error=self._fail(e))

    def get_authorization_url_sync(self) -> AuthorizationUrlResult:
        try:
            self._transition(FlowState.REQUEST_TOKEN_REQUESTED)
        except FlowStateError as e:
            return AuthorizationUrlResult(error=e)

        try:
            response = self.client.request_sync(self._request_token_context())
            return self._finish_request_token(response)
        except Exception as e:
            return AuthorizationUrlResult(error=self._fail(e))

    async def request_access_token(self, token: str, verifier: str) -> AccessTokenResult:
        """
        Redeem an authorized request token for an access token.

        The pending secret for `token` is consumed whatever the outcome. On
        success the access token is installed in the session.
        """
        try:
            self._transition(FlowState.ACCESS_TOKEN_REQUESTED)
        except FlowStateError as e:
            return AccessTokenResult(error=e)

        try:
            context = self._access_token_context(token, verifier)
            response = await self.client.request(context)
            return self._finish_access_token(response)
        except Exception as e:
            return AccessTokenResult(error=self._fail(e))

    def request_access_token_sync(self, token: str, verifier: str) -> AccessTokenResult:
        try:
            self._transition(FlowState.ACCESS_TOKEN_REQUESTED)
        except FlowStateError as e:
            return AccessTokenResult(error=e)

        try:
            context = self._access_token_context(token, verifier)
            response = self.client.request_sync(context)
            return self._finish_access_token(response)
        except Exception as e:
            return AccessTokenResult(error=self._fail(e))

    async def complete_authorization(self, callback_url: str) -> AccessTokenResult:
        """
        Handle the provider's redirect: exchange the token, then resolve the
        user name with one identity call made after the token is installed.
        """
        try:
            token, verifier = self._read_callback(callback_url)
        except OAuthError as e:
            return AccessTokenResult(error=e)

        result = await self.request_access_token(token, verifier)
        if not result.ok:
            return result

        try:
            user = await self.client.me(verify_scopes=False, access_token=result.access_token)
            result.user = user.name
        except Exception as e:
            result.identity_error = _as_oauth_error(e)
            logger.warning("Identity check after token exchange failed: %s", e)
        return result

    def complete_authorization_sync(self, callback_url: str) -> AccessTokenResult:
        try:
            token, verifier = self._read_callback(callback_url)
        except OAuthError as e:
            return AccessTokenResult(error=e)

        result = self.request_access_token_sync(token, verifier)
        if not result.ok:
            return result

        try:
            user = self.client.me_sync(verify_scopes=False, access_token=result.access_token)
            result.user = user.name
        except Exception as e:
            result.identity_error = _as_oauth_error(e)
            logger.warning("Identity check after token exchange failed: %s", e)
        return result

    def _transition(self, new_state: FlowState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise FlowStateError(f"Cannot go from {self.state.value} to {new_state.value}")
        logger.debug("OAuth flow %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _fail(self, error: Exception) -> OAuthError:
        error = _as_oauth_error(error)
        logger.warning("OAuth flow failed in %s: %s", self.state.value, error)
        if _TRANSITIONS[self.state]:
            self.state = FlowState.FAILED
        return error

    def _read_callback(self, callback_url: str) -> tuple[str, str]:
        # NoCallbackData leaves the state alone so the caller can prompt again
        try:
            data = parse_callback_url(callback_url)
            if not data.get("oauth_verifier"):
                raise ProtocolParseError("Callback is missing oauth_verifier")
        except ProtocolParseError as e:
            self._fail(e)
            raise
        return data["oauth_token"], data["oauth_verifier"]

    def _request_token_context(self) -> SignatureContext:
        return SignatureContext(
            method="POST",
            hostname=self.config.oauth_hostname,
            path_prefix="",
            path=self.config.request_token_path,
            options=SigningOptions(
                consumer_only=True,
                use_raw_transport=True,
                verify_scopes=False,
            ),
        )

    def _access_token_context(self, token: str, verifier: str) -> SignatureContext:
        secret = self.session.consume_pending_token(token)
        if secret is None:
            raise ProtocolParseError("Callback token does not match a pending request token")

        return SignatureContext(
            method="POST",
            hostname=self.config.oauth_hostname,
            path_prefix="",
            path=self.config.access_token_path,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            options=SigningOptions(
                token=token,
                token_secret=secret,
                extra_oauth_params=[("oauth_verifier", verifier)],
                use_raw_transport=True,
                verify_scopes=False,
            ),
        )

    def _finish_request_token(self, response: TransportResponse) -> AuthorizationUrlResult:
        token, secret = parse_token_response(response.body)
        self.session.remember_pending_token(token, secret)
        self._transition(FlowState.AWAITING_USER_AUTHORIZATION)

        url = f"{self.config.authorize_url}?{urlencode({'oauth_token': token})}"
        return AuthorizationUrlResult(url=url, request_token=token)

    def _finish_access_token(self, response: TransportResponse) -> AccessTokenResult:
        token, secret = parse_token_response(response.body)
        access_token = AccessToken(token=token, secret=secret, scopes=self.config.scopes)
        self.session.set_access_token(access_token)
        self._transition(FlowState.AUTHENTICATED)
        return AccessTokenResult(access_token=access_token)

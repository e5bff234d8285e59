"""
Credential state owned by one authenticated session.
"""

import threading

from .models import AccessToken, ConsumerCredential


class OAuthSession:
    """
    Holds the consumer credential, the current access token and the request
    tokens still waiting for user authorization.

    This is the only place either kind of token is written. All mutations
    take one lock, so a session can be shared between threads or asyncio
    tasks. Separate sessions never share state.

    Args:
        credential: Immutable consumer credential
        access_token: Initial access token, if one is already known

    Example:
        >>> session = OAuthSession(ConsumerCredential("ck", "cs"))
        >>> session.remember_pending_token("rt", "rts")
        >>> session.consume_pending_token("rt")
        'rts'
        >>> session.consume_pending_token("rt") is None
        True
    """

    def __init__(
        self,
        credential: ConsumerCredential,
        access_token: AccessToken | None = None,
    ):
        self.credential = credential
        self._access_token = access_token
        self._pending: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_access_token(self) -> AccessToken | None:
        with self._lock:
            return self._access_token

    def set_access_token(self, token: AccessToken) -> None:
        """Replace the stored access token as a whole."""
        with self._lock:
            self._access_token = token

    def clear_access_token(self) -> None:
        with self._lock:
            self._access_token = None

    def remember_pending_token(self, request_token: str, secret: str) -> None:
        with self._lock:
            self._pending[request_token] = secret

    def consume_pending_token(self, request_token: str) -> str | None:
        """Return the secret for a request token and forget it."""
        with self._lock:
            return self._pending.pop(request_token, None)

    def has_pending_token(self, request_token: str) -> bool:
        with self._lock:
            return request_token in self._pending

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

"""
WSGI middleware completing the OAuth exchange on the callback route (Flask).
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

from ..client import TumblrClient
from ..errors import NoCallbackData

RESULT_ENVIRON_KEY = "tumblr_oauth.result"


def _build_url(environ: dict[str, Any]) -> str:
    """Build full URL from WSGI environ."""
    scheme = environ.get("wsgi.url_scheme", "http")
    host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "localhost")
    path = environ.get("PATH_INFO", "/")
    query = environ.get("QUERY_STRING", "")

    url = f"{scheme}://{host}{path}"
    if query:
        url = f"{url}?{query}"
    return url


class OAuthCallbackWSGIMiddleware:
    """
    WSGI middleware that redeems the provider's redirect for an access token.

    Uses the synchronous flow and stores the AccessTokenResult in
    `environ["tumblr_oauth.result"]`.

    Args:
        app: WSGI application
        client: Client whose session receives the access token
        callback_path: Path the provider redirects to. Default: /callback
        require_authenticated: If True, answer 401 (400 when the callback
            carried no data) instead of calling the app when the exchange fails

    Example (Flask):
        >>> app = Flask(__name__)
        >>> app.wsgi_app = OAuthCallbackWSGIMiddleware(app.wsgi_app, client=client)
        >>>
        >>> @app.route("/callback")
        >>> def callback():
        ...     result = request.environ["tumblr_oauth.result"]
        ...     return {"user": result.user}
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        client: TumblrClient,
        callback_path: str = "/callback",
        require_authenticated: bool = False,
    ):
        self.app = app
        self.client = client
        self.callback_path = callback_path
        self.require_authenticated = require_authenticated

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "/") != self.callback_path:
            return self.app(environ, start_response)

        result = self.client.flow().complete_authorization_sync(_build_url(environ))
        environ[RESULT_ENVIRON_KEY] = result

        if not result.ok and self.require_authenticated:
            status = (
                "400 Bad Request"
                if isinstance(result.error, NoCallbackData)
                else "401 Unauthorized"
            )
            return self._error_response(start_response, status, str(result.error))

        def custom_start_response(
            status: str,
            response_headers: list[tuple[str, str]],
            exc_info: Any = None,
        ) -> Any:
            decision = "authenticated" if result.ok else "failed"
            response_headers.append(("X-OAuth-Decision", decision))
            return start_response(status, response_headers, exc_info)

        return self.app(environ, custom_start_response)

    def _error_response(
        self,
        start_response: Callable[..., Any],
        status: str,
        error: str,
    ) -> Iterable[bytes]:
        body = json.dumps({"error": error}).encode("utf-8")
        start_response(
            status,
            [
                ("Content-Type", "application/json"),
                ("Content-Length", str(len(body))),
                ("X-OAuth-Decision", "deny"),
            ],
        )
        return [body]

"""
ASGI middleware completing the OAuth exchange on the callback route (FastAPI/Starlette).
"""

from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..client import TumblrClient
from ..errors import NoCallbackData


class OAuthCallbackASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware that redeems the provider's redirect for an access token.

    Requests to `callback_path` run the access-token leg and the identity
    check; the AccessTokenResult is attached to `request.state.oauth`. Other
    paths pass through untouched.

    Args:
        app: ASGI application
        client: Client whose session receives the access token
        callback_path: Path the provider redirects to. Default: /callback
        require_authenticated: If True, answer 401 (400 when the callback
            carried no data) instead of calling the app when the exchange
            fails. If False (default), attach the result and call the app.

    Example (FastAPI):
        >>> app = FastAPI()
        >>> app.add_middleware(OAuthCallbackASGIMiddleware, client=client)
        >>>
        >>> @app.get("/callback")
        >>> async def callback(request: Request):
        ...     result = request.state.oauth
        ...     return {"user": result.user}
    """

    def __init__(
        self,
        app: Any,
        client: TumblrClient,
        callback_path: str = "/callback",
        require_authenticated: bool = False,
    ):
        super().__init__(app)
        self.client = client
        self.callback_path = callback_path
        self.require_authenticated = require_authenticated

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        if request.url.path != self.callback_path:
            return await call_next(request)

        result = await self.client.flow().complete_authorization(str(request.url))
        request.state.oauth = result

        if not result.ok and self.require_authenticated:
            return JSONResponse(
                status_code=400 if isinstance(result.error, NoCallbackData) else 401,
                content={"error": str(result.error)},
                headers={"X-OAuth-Decision": "deny"},
            )

        response = await call_next(request)
        response.headers["X-OAuth-Decision"] = "authenticated" if result.ok else "failed"
        return response

"""
HTTP transport for signed requests.
"""

import logging

import httpx

from .errors import TransportError
from .models import TransportRequest, TransportResponse

logger = logging.getLogger(__name__)


class HttpxTransport:
    """
    Sends prepared requests with httpx.

    Opens a client per call. Anything that keeps a request from ending in a
    2xx answer is raised as TransportError; the transport never retries.

    Args:
        timeout_s: Request timeout in seconds. Default: 10.0
    """

    def __init__(self, timeout_s: float = 10.0):
        self.timeout_s = timeout_s

    async def send(self, request: TransportRequest) -> TransportResponse:
        """Send a request asynchronously."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    params=request.params or None,
                )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            logger.warning("%s %s failed: %s", request.method, request.url, e)
            raise TransportError(f"Request failed: {e}") from e

        return self._to_response(request, response)

    def send_sync(self, request: TransportRequest) -> TransportResponse:
        """Send a request synchronously."""
        try:
            with httpx.Client(timeout=self.timeout_s) as client:
                response = client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    params=request.params or None,
                )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            logger.warning("%s %s failed: %s", request.method, request.url, e)
            raise TransportError(f"Request failed: {e}") from e

        return self._to_response(request, response)

    def _to_response(self, request: TransportRequest, response: httpx.Response) -> TransportResponse:
        """Convert an httpx response, raising on error statuses."""
        result = TransportResponse(
            status_code=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.text,
        )
        if response.status_code >= 400:
            logger.warning(
                "%s %s answered %s", request.method, request.url, response.status_code
            )
            raise TransportError(
                f"Provider answered {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return result

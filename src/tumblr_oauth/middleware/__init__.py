"""
OAuth callback middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from tumblr_oauth.middleware import OAuthCallbackASGIMiddleware
    from tumblr_oauth.middleware import OAuthCallbackWSGIMiddleware
"""

from .wsgi import OAuthCallbackWSGIMiddleware

__all__: list[str] = ["OAuthCallbackWSGIMiddleware"]

# ASGI middleware (FastAPI, Starlette)
try:
    from .asgi import OAuthCallbackASGIMiddleware
    __all__.append("OAuthCallbackASGIMiddleware")
except ImportError:
    pass

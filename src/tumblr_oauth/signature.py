"""
OAuth 1.0a HMAC-SHA1 request signing and Authorization header parsing.
"""

import base64
import hashlib
import hmac
import re
from typing import Mapping
from urllib.parse import quote, unquote

from .config import DEFAULT_API_HOSTNAME, DEFAULT_PATH_PREFIX, TumblrConfig
from .errors import MissingCredential, MissingMethod, MissingTarget
from .models import AccessToken, ConsumerCredential, SignatureContext
from .nonce import generate_nonce, generate_timestamp

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
AUTH_SCHEME = "OAuth"

# Characters left alone by URI-component encoding, besides alphanumerics and "_.-~"
_COMPONENT_SAFE = "!*'()"

_HEADER_PARAM_RE = re.compile(r'([A-Za-z0-9_]+)="([^"]*)"')


def percent_encode(value: str) -> str:
    """
    URI-component encode a value.

    Examples:
        >>> percent_encode("https://example.com/cb")
        'https%3A%2F%2Fexample.com%2Fcb'
        >>> percent_encode("it's (fine)!")
        "it's%20(fine)!"
    """
    return quote(value, safe=_COMPONENT_SAFE)


def resolve_url(context: SignatureContext, config: TumblrConfig | None = None) -> str:
    """
    Assemble the https URL of a request, without query string.

    Host, prefix and path come from the context when set, else from config.

    Raises:
        MissingTarget: If no path resolves
    """
    hostname = context.hostname
    if hostname is None:
        hostname = config.hostname if config else DEFAULT_API_HOSTNAME
    path_prefix = context.path_prefix
    if path_prefix is None:
        path_prefix = config.path_prefix if config else DEFAULT_PATH_PREFIX
    if not context.path:
        raise MissingTarget("No path to sign for")
    return f"https://{hostname}{path_prefix}{context.path}"


def build_oauth_params(
    credential: ConsumerCredential,
    nonce: str,
    timestamp: int,
    token: str | None = None,
    extra_oauth_params: list[tuple[str, str]] | None = None,
) -> list[tuple[str, str]]:
    """
    Build the ordered OAuth parameter list, values already in header form.

    Only oauth_callback is percent-encoded here; the remaining values go on
    the wire as given.
    """
    params = [
        ("oauth_callback", percent_encode(credential.callback_uri or "")),
        ("oauth_consumer_key", credential.consumer_key),
        ("oauth_nonce", nonce),
        ("oauth_signature_method", SIGNATURE_METHOD),
        ("oauth_timestamp", str(timestamp)),
    ]
    if token:
        params.append(("oauth_token", token))
    params.extend(extra_oauth_params or [])
    params.append(("oauth_version", OAUTH_VERSION))
    return params


def _join_pairs(pairs: list[tuple[str, str]]) -> str:
    # Quotes of the name="value" header form never reach the base string
    return "&".join(f"{name}={value}" for name, value in pairs).replace('"', "")


def build_base_string(
    method: str,
    url: str,
    oauth_params: list[tuple[str, str]],
    query: Mapping[str, str] | None = None,
) -> str:
    """
    Build the signature base string.

    The OAuth segment is encoded on top of its header-form values (so the
    callback ends up encoded twice) while query values are encoded once.
    Double quotes are removed from both segments.

    Examples:
        >>> build_base_string("GET", "https://h/p", [("oauth_nonce", "n")], {"a": "b"})
        'GET&https%3A%2F%2Fh%2Fp&oauth_nonce%3Dn%26a%3Db'
        >>> build_base_string("GET", "https://h/p", [("oauth_nonce", "n")], {"q": 'say "hi"'})
        'GET&https%3A%2F%2Fh%2Fp&oauth_nonce%3Dn%26q%3Dsay%20hi'
    """
    extra = [(name, str(value)) for name, value in (query or {}).items()]
    suffix = ("&" if extra else "") + _join_pairs(extra)
    return "&".join([
        method,
        percent_encode(url),
        percent_encode(_join_pairs(oauth_params)) + percent_encode(suffix),
    ])


def signing_key(consumer_secret: str, token_secret: str | None = None) -> str:
    """Raw `consumer_secret&token_secret` concatenation."""
    return f"{consumer_secret}&{token_secret or ''}"


def compute_signature(base_string: str, key: str) -> str:
    """Base64 of HMAC-SHA1(key, base_string)."""
    digest = hmac.new(
        key.encode("utf-8"),
        base_string.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def _resolve_token(
    context: SignatureContext,
    access_token: AccessToken | None,
    config: TumblrConfig | None,
) -> str | None:
    if context.options.token:
        return context.options.token
    if context.options.consumer_only:
        return None
    if access_token is not None:
        return access_token.token
    if config is not None and config.access_token:
        return config.access_token
    return None


def _resolve_token_secret(
    context: SignatureContext,
    access_token: AccessToken | None,
    config: TumblrConfig | None,
) -> str:
    if context.options.token_secret is not None:
        return context.options.token_secret
    if context.options.consumer_only:
        return ""
    if access_token is not None and access_token.secret:
        return access_token.secret
    if config is not None and config.access_token_secret:
        return config.access_token_secret
    return ""


def format_authorization_header(params: list[tuple[str, str]]) -> str:
    """Render `OAuth name="value",...` in the given order."""
    return f"{AUTH_SCHEME} " + ",".join(f'{name}="{value}"' for name, value in params)


def sign(
    context: SignatureContext,
    credential: ConsumerCredential,
    access_token: AccessToken | None = None,
    config: TumblrConfig | None = None,
    *,
    nonce: str | None = None,
    timestamp: int | None = None,
) -> str:
    """
    Compute the Authorization header value for one request.

    Token precedence: explicit override on the context, then the stored
    access token, then the token on the config. With `consumer_only` set,
    only an explicit override is used and nothing falls back to stored or
    configured tokens.

    Args:
        context: Method, target and overrides of the request
        credential: Consumer credential
        access_token: Currently stored access token, if any
        config: Supplies default host/prefix and a long-lived token
        nonce: Fixed nonce, generated when omitted
        timestamp: Fixed timestamp, generated when omitted

    Returns:
        Value for the Authorization header

    Raises:
        MissingCredential: If consumer key or secret is empty
        MissingMethod: If the context has no method
        MissingTarget: If no path resolves
    """
    if not credential.consumer_key or not credential.consumer_secret:
        raise MissingCredential("Consumer key and consumer secret are required")
    if not context.method:
        raise MissingMethod("No HTTP method to sign for")
    url = resolve_url(context, config)
    method = context.method.upper()

    params = build_oauth_params(
        credential,
        nonce=nonce if nonce is not None else generate_nonce(),
        timestamp=timestamp if timestamp is not None else generate_timestamp(),
        token=_resolve_token(context, access_token, config),
        extra_oauth_params=context.options.extra_oauth_params,
    )

    base_string = build_base_string(method, url, params, context.query)
    key = signing_key(
        credential.consumer_secret,
        _resolve_token_secret(context, access_token, config),
    )
    params.append(("oauth_signature", percent_encode(compute_signature(base_string, key))))

    return format_authorization_header(params)


def parse_authorization_header(value: str) -> dict[str, str]:
    """
    Parse an `OAuth ...` header value into decoded name/value pairs.

    Examples:
        >>> parse_authorization_header('OAuth oauth_callback="a%2Fb",oauth_version="1.0"')
        {'oauth_callback': 'a/b', 'oauth_version': '1.0'}
        >>> parse_authorization_header('Bearer abc')
        {}
    """
    scheme, _, rest = value.strip().partition(" ")
    if scheme != AUTH_SCHEME:
        return {}
    return {name: unquote(raw) for name, raw in _HEADER_PARAM_RE.findall(rest)}

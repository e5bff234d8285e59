"""Tests for OAuth 1.0a signing."""

import base64
import hashlib
import hmac

import pytest

from tumblr_oauth.config import TumblrConfig
from tumblr_oauth.errors import MissingCredential, MissingMethod, MissingTarget
from tumblr_oauth.models import AccessToken, ConsumerCredential, SignatureContext, SigningOptions
from tumblr_oauth.signature import (
    build_base_string,
    build_oauth_params,
    parse_authorization_header,
    percent_encode,
    resolve_url,
    sign,
    signing_key,
)

NONCE = "N" * 32
CREDENTIAL = ConsumerCredential("ck", "cs", "https://example.com/cb")


def reference_signature(base_string: str, key: str) -> str:
    """HMAC-SHA1 computed straight from the standard library."""
    digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def request_token_context() -> SignatureContext:
    return SignatureContext(
        method="POST",
        hostname="www.tumblr.com",
        path_prefix="",
        path="/oauth/request_token",
    )


class TestPercentEncode:
    """Tests for percent_encode."""

    def test_url(self):
        """Reserved URL characters are encoded."""
        assert percent_encode("https://example.com/cb?a=b&c") == "https%3A%2F%2Fexample.com%2Fcb%3Fa%3Db%26c"

    def test_unreserved_left_alone(self):
        """URI-component unreserved characters pass through."""
        assert percent_encode("AZaz09-_.!~*'()") == "AZaz09-_.!~*'()"

    def test_space_and_unicode(self):
        """Spaces and non-ASCII become UTF-8 percent escapes."""
        assert percent_encode("a b") == "a%20b"
        assert percent_encode("é") == "%C3%A9"

    def test_base64_characters(self):
        """Base64 padding and slashes are encoded."""
        assert percent_encode("ab/c+d=") == "ab%2Fc%2Bd%3D"


class TestResolveUrl:
    """Tests for resolve_url."""

    def test_defaults(self):
        """Host and prefix default to the API host."""
        assert resolve_url(SignatureContext(method="GET", path="user/info")) == "https://api.tumblr.com/v2/user/info"

    def test_config_defaults(self):
        """Config supplies host and prefix."""
        config = TumblrConfig("ck", "cs", hostname="api.example.com", path_prefix="/v9/")
        context = SignatureContext(method="GET", path="me")
        assert resolve_url(context, config) == "https://api.example.com/v9/me"

    def test_context_overrides(self):
        """Context host and empty prefix win over defaults."""
        assert resolve_url(request_token_context()) == "https://www.tumblr.com/oauth/request_token"

    def test_missing_path(self):
        """No path raises MissingTarget."""
        with pytest.raises(MissingTarget):
            resolve_url(SignatureContext(method="GET"))


class TestBaseString:
    """Tests for base string construction."""

    def test_request_token_golden(self):
        """Base string of the request-token leg is byte-exact."""
        params = build_oauth_params(CREDENTIAL, nonce=NONCE, timestamp=0)
        base = build_base_string("POST", "https://www.tumblr.com/oauth/request_token", params)
        assert base == (
            "POST&https%3A%2F%2Fwww.tumblr.com%2Foauth%2Frequest_token&"
            "oauth_callback%3Dhttps%253A%252F%252Fexample.com%252Fcb"
            "%26oauth_consumer_key%3Dck"
            "%26oauth_nonce%3DNNNNNNNNNNNNNNNNNNNNNNNNNNNNNNNN"
            "%26oauth_signature_method%3DHMAC-SHA1"
            "%26oauth_timestamp%3D0"
            "%26oauth_version%3D1.0"
        )

    def test_query_params_encoded_once(self):
        """Query parameters follow the OAuth segment, encoded once."""
        params = build_oauth_params(CREDENTIAL, nonce=NONCE, timestamp=0, token="tok")
        base = build_base_string(
            "GET",
            "https://api.tumblr.com/v2/blog/example/posts",
            params,
            {"limit": "5", "tag": "cats dogs"},
        )
        assert base.endswith("%26oauth_version%3D1.0%26limit%3D5%26tag%3Dcats%20dogs")

    def test_param_order(self):
        """OAuth parameters keep their fixed order."""
        params = build_oauth_params(
            CREDENTIAL,
            nonce=NONCE,
            timestamp=1,
            token="rt",
            extra_oauth_params=[("oauth_verifier", "v")],
        )
        assert [name for name, _ in params] == [
            "oauth_callback",
            "oauth_consumer_key",
            "oauth_nonce",
            "oauth_signature_method",
            "oauth_timestamp",
            "oauth_token",
            "oauth_verifier",
            "oauth_version",
        ]

    def test_signing_key(self):
        """Signing key is a raw concatenation."""
        assert signing_key("cs", "ts") == "cs&ts"
        assert signing_key("cs", None) == "cs&"
        assert signing_key("c&s", "t s") == "c&s&t s"


class TestSign:
    """Tests for the full Authorization header."""

    def test_request_token_golden(self):
        """Request-token leg header matches a precomputed value."""
        header = sign(request_token_context(), CREDENTIAL, nonce=NONCE, timestamp=0)
        assert header == (
            'OAuth oauth_callback="https%3A%2F%2Fexample.com%2Fcb",'
            'oauth_consumer_key="ck",'
            f'oauth_nonce="{NONCE}",'
            'oauth_signature_method="HMAC-SHA1",'
            'oauth_timestamp="0",'
            'oauth_version="1.0",'
            'oauth_signature="1g35BEhGlW0B%2F4Q%2Fh0QOX5jWDhk%3D"'
        )

    def test_request_token_matches_reference_hmac(self):
        """Signature equals an HMAC computed independently over the base string."""
        base = (
            "POST&https%3A%2F%2Fwww.tumblr.com%2Foauth%2Frequest_token&"
            "oauth_callback%3Dhttps%253A%252F%252Fexample.com%252Fcb%26oauth_consumer_key%3Dck"
            f"%26oauth_nonce%3D{NONCE}%26oauth_signature_method%3DHMAC-SHA1"
            "%26oauth_timestamp%3D0%26oauth_version%3D1.0"
        )
        header = sign(request_token_context(), CREDENTIAL, nonce=NONCE, timestamp=0)
        parsed = parse_authorization_header(header)
        assert parsed["oauth_signature"] == reference_signature(base, "cs&")

    def test_get_with_access_token_golden(self):
        """GET with a stored access token and no query matches a precomputed value."""
        context = SignatureContext(method="GET", path="user/info")
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=0)
        assert header.startswith('OAuth oauth_callback="https%3A%2F%2Fexample.com%2Fcb",')
        assert ',oauth_timestamp="0",oauth_token="tok",oauth_version="1.0",' in header
        assert header.endswith('oauth_signature="jBnpAvN2%2F1P9vEgc1FutD%2FozJHg%3D"')

    def test_get_with_query_golden(self):
        """Query parameters change the signature to a precomputed value."""
        context = SignatureContext(
            method="GET",
            path="blog/example/posts",
            query={"limit": "5", "tag": "cats dogs"},
        )
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=0)
        assert header.endswith('oauth_signature="faO7DJcm0efdIGQKLijG2O52lsg%3D"')
        # query parameters never appear in the header
        assert "limit" not in header

    def test_quoted_query_value_golden(self):
        """Double quotes in a query value are dropped from the base string."""
        context = SignatureContext(
            method="GET",
            path="blog/example/posts",
            query={"q": 'say "hi"'},
        )
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=0)
        assert header.endswith('oauth_signature="kKhZ0SYpjZJgxP%2BmWaRbKkAMiKU%3D"')

        params = build_oauth_params(CREDENTIAL, nonce=NONCE, timestamp=0, token="tok")
        base = build_base_string(
            "GET",
            "https://api.tumblr.com/v2/blog/example/posts",
            params,
            {"q": 'say "hi"'},
        )
        assert base.endswith("%26oauth_version%3D1.0%26q%3Dsay%20hi")
        assert "%22" not in base

    def test_access_token_leg_golden(self):
        """Override token, secret and verifier produce a precomputed value."""
        context = SignatureContext(
            method="POST",
            hostname="www.tumblr.com",
            path_prefix="",
            path="/oauth/access_token",
            options=SigningOptions(
                token="rt",
                token_secret="rts",
                extra_oauth_params=[("oauth_verifier", "v3r")],
            ),
        )
        header = sign(context, CREDENTIAL, nonce=NONCE, timestamp=0)
        assert ',oauth_token="rt",oauth_verifier="v3r",oauth_version="1.0",' in header
        assert header.endswith('oauth_signature="X9MeqyLoDKaI3QTnXQv8rZFyIVw%3D"')

    def test_fresh_nonce_and_timestamp(self):
        """Unfixed calls generate a new nonce each time."""
        context = SignatureContext(method="GET", path="user/info")
        first = parse_authorization_header(sign(context, CREDENTIAL))
        second = parse_authorization_header(sign(context, CREDENTIAL))
        assert first["oauth_nonce"] != second["oauth_nonce"]
        assert len(first["oauth_nonce"]) == 32
        assert first["oauth_timestamp"].isdigit()

    def test_deterministic_with_fixed_inputs(self):
        """Fixed nonce and timestamp give identical headers."""
        context = SignatureContext(method="GET", path="user/info")
        token = AccessToken("tok", "tsec")
        assert sign(context, CREDENTIAL, token, nonce="abc", timestamp=42) == sign(
            context, CREDENTIAL, token, nonce="abc", timestamp=42
        )

    def test_method_uppercased(self):
        """Lowercase methods sign like uppercase ones."""
        lower = SignatureContext(method="get", path="user/info")
        upper = SignatureContext(method="GET", path="user/info")
        assert sign(lower, CREDENTIAL, nonce=NONCE, timestamp=0) == sign(upper, CREDENTIAL, nonce=NONCE, timestamp=0)

    def test_round_trip(self):
        """Parsing the header gives back every parameter that was signed."""
        context = SignatureContext(
            method="POST",
            path="blog/example/post",
            options=SigningOptions(extra_oauth_params=[("oauth_verifier", "v3r")]),
        )
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=7)
        parsed = parse_authorization_header(header)

        assert parsed["oauth_callback"] == "https://example.com/cb"
        assert parsed["oauth_consumer_key"] == "ck"
        assert parsed["oauth_nonce"] == NONCE
        assert parsed["oauth_signature_method"] == "HMAC-SHA1"
        assert parsed["oauth_timestamp"] == "7"
        assert parsed["oauth_token"] == "tok"
        assert parsed["oauth_verifier"] == "v3r"
        assert parsed["oauth_version"] == "1.0"
        assert list(parsed)[-1] == "oauth_signature"

    def test_no_token(self):
        """Without any token, oauth_token is omitted."""
        header = sign(request_token_context(), CREDENTIAL, nonce=NONCE, timestamp=0)
        assert "oauth_token" not in parse_authorization_header(header)


class TestTokenPrecedence:
    """Tests for token and secret selection."""

    def test_override_beats_stored_token(self):
        """Explicit token and secret win over the stored access token."""
        overridden = SignatureContext(
            method="GET",
            path="user/info",
            options=SigningOptions(token="over", token_secret="osec"),
        )
        plain = SignatureContext(method="GET", path="user/info")

        assert sign(overridden, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=0) == sign(
            plain, CREDENTIAL, AccessToken("over", "osec"), nonce=NONCE, timestamp=0
        )

    def test_stored_token_beats_config(self):
        """Stored access token wins over the configured one."""
        config = TumblrConfig("ck", "cs", access_token="cfg", access_token_secret="cfgsec")
        context = SignatureContext(method="GET", path="user/info")
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), config, nonce=NONCE, timestamp=0)
        assert parse_authorization_header(header)["oauth_token"] == "tok"

    def test_config_token_used_last(self):
        """Configured token and secret sign when nothing else is available."""
        config = TumblrConfig("ck", "cs", access_token="cfg", access_token_secret="cfgsec")
        context = SignatureContext(method="GET", path="user/info")

        assert sign(context, CREDENTIAL, None, config, nonce=NONCE, timestamp=0) == sign(
            context, CREDENTIAL, AccessToken("cfg", "cfgsec"), nonce=NONCE, timestamp=0
        )

    def test_override_token_without_secret(self):
        """An override token without a secret does not double as its own secret."""
        overridden = SignatureContext(
            method="GET",
            path="user/info",
            options=SigningOptions(token="over"),
        )
        plain = SignatureContext(method="GET", path="user/info")

        assert sign(overridden, CREDENTIAL, nonce=NONCE, timestamp=0) == sign(
            plain, CREDENTIAL, AccessToken("over", ""), nonce=NONCE, timestamp=0
        )

    def test_consumer_only_ignores_stored_and_config_tokens(self):
        """Consumer-only signing leaves out every token it was not handed explicitly."""
        config = TumblrConfig("ck", "cs", access_token="cfg", access_token_secret="cfgsec")
        context = request_token_context()
        context.options = SigningOptions(consumer_only=True)
        header = sign(context, CREDENTIAL, AccessToken("tok", "tsec"), config, nonce=NONCE, timestamp=0)

        assert "oauth_token" not in parse_authorization_header(header)
        assert header == sign(request_token_context(), CREDENTIAL, nonce=NONCE, timestamp=0)
        assert header.endswith('oauth_signature="1g35BEhGlW0B%2F4Q%2Fh0QOX5jWDhk%3D"')

    def test_empty_override_secret(self):
        """An explicit empty secret is used instead of the stored one."""
        overridden = SignatureContext(
            method="GET",
            path="user/info",
            options=SigningOptions(token="over", token_secret=""),
        )
        plain = SignatureContext(method="GET", path="user/info")

        assert sign(overridden, CREDENTIAL, AccessToken("tok", "tsec"), nonce=NONCE, timestamp=0) == sign(
            plain, CREDENTIAL, AccessToken("over", ""), nonce=NONCE, timestamp=0
        )


class TestSignErrors:
    """Tests for signing error conditions."""

    @pytest.mark.parametrize("key,secret", [("", "cs"), ("ck", ""), ("", "")])
    def test_missing_credential(self, key, secret):
        """Empty consumer key or secret raises MissingCredential."""
        with pytest.raises(MissingCredential):
            sign(SignatureContext(method="GET", path="user/info"), ConsumerCredential(key, secret))

    def test_missing_method(self):
        """No method raises MissingMethod."""
        with pytest.raises(MissingMethod):
            sign(SignatureContext(path="user/info"), CREDENTIAL)

    def test_missing_target(self):
        """No path raises MissingTarget."""
        with pytest.raises(MissingTarget):
            sign(SignatureContext(method="GET"), CREDENTIAL)

    def test_errors_are_value_errors(self):
        """Signing errors are ValueErrors, like other caller mistakes."""
        with pytest.raises(ValueError):
            sign(SignatureContext(method="GET"), CREDENTIAL)


class TestParseAuthorizationHeader:
    """Tests for parse_authorization_header."""

    def test_other_scheme(self):
        """Non-OAuth headers parse to an empty dict."""
        assert parse_authorization_header("Bearer abc") == {}

    def test_decodes_values(self):
        """Values are percent-decoded."""
        parsed = parse_authorization_header('OAuth oauth_signature="ab%2Fc%3D"')
        assert parsed == {"oauth_signature": "ab/c="}

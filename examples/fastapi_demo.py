"""
FastAPI demo of the Tumblr OAuth 1.0a dance.

Usage:
    # Install dependencies
    pip install -e ".[fastapi]"

    # Run the server
    uvicorn examples.fastapi_demo:app --port 8009 --reload

    # Or directly
    python examples/fastapi_demo.py

Then open http://localhost:8009/login in a browser. Tumblr redirects back
to /callback, where the middleware redeems the request token.

Environment variables:
    TUMBLR_CONSUMER_KEY - OAuth consumer key of your Tumblr app
    TUMBLR_CONSUMER_SECRET - OAuth consumer secret of your Tumblr app
    TUMBLR_CALLBACK_URI - Must match the app settings,
                          e.g. http://localhost:8009/callback
    TUMBLR_REQUIRE_AUTHENTICATED - Set to "true" to answer 401 on failed callbacks
"""

import os
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

# Import from installed package
from tumblr_oauth import OAuthCallbackASGIMiddleware, OAuthError, TumblrClient, TumblrConfig

# Configuration from environment
REQUIRE_AUTHENTICATED = os.getenv("TUMBLR_REQUIRE_AUTHENTICATED", "false").lower() == "true"

client = TumblrClient(TumblrConfig.from_env())

app = FastAPI(
    title="Tumblr OAuth Demo API",
    description="Demo of the three-legged OAuth 1.0a exchange against Tumblr",
    version="0.1.0",
)

# Redeem the provider's redirect before the /callback handler runs
app.add_middleware(
    OAuthCallbackASGIMiddleware,
    client=client,
    callback_path="/callback",
    require_authenticated=REQUIRE_AUTHENTICATED,
)


@app.get("/")
async def root():
    """API info endpoint."""
    token = client.session.get_access_token()
    return {
        "service": "Tumblr OAuth Demo API",
        "authenticated": token is not None,
        "remaining_requests": client.remaining_requests,
        "endpoints": {
            "/login": "Redirects to Tumblr for authorization",
            "/callback": "Tumblr redirects here after authorization",
            "/me": "Profile of the authenticated user",
        },
    }


@app.get("/login")
async def login():
    """Start the dance: obtain a request token and redirect to Tumblr."""
    result = await client.flow().get_authorization_url()
    if not result.ok:
        return JSONResponse(status_code=502, content={"error": str(result.error)})
    return RedirectResponse(result.url)


@app.get("/callback")
async def callback(request: Request):
    """Report what the middleware did with the redirect."""
    result = getattr(request.state, "oauth", None)

    if not result:
        return JSONResponse(
            status_code=500,
            content={"error": "Middleware not configured"},
        )

    if not result.ok:
        return {"authenticated": False, "error": str(result.error)}

    response_data = {"authenticated": True, "user": result.user}
    if result.identity_error:
        response_data["identity_error"] = str(result.identity_error)
    return response_data


@app.get("/me")
async def me():
    """Returns the authenticated user's profile."""
    try:
        user = await client.me()
    except OAuthError as e:
        return JSONResponse(status_code=401, content={"error": str(e)})
    return {"user": user.json}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8009)

"""
Flask demo of the Tumblr OAuth 1.0a dance.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    flask --app examples.flask_demo run --port 8010

    # Or directly
    python examples/flask_demo.py

Then open http://localhost:8010/login in a browser.

Environment variables:
    TUMBLR_CONSUMER_KEY - OAuth consumer key of your Tumblr app
    TUMBLR_CONSUMER_SECRET - OAuth consumer secret of your Tumblr app
    TUMBLR_CALLBACK_URI - Must match the app settings,
                          e.g. http://localhost:8010/callback
"""

from flask import Flask, g, jsonify, redirect, request

# Import from installed package
from tumblr_oauth import OAuthError, TumblrClient, TumblrConfig
from tumblr_oauth.middleware import OAuthCallbackWSGIMiddleware

client = TumblrClient(TumblrConfig.from_env())

app = Flask(__name__)

# Wrap with the callback middleware
app.wsgi_app = OAuthCallbackWSGIMiddleware(app.wsgi_app, client=client)


@app.before_request
def extract_oauth_result():
    """Expose the callback result on Flask's g object."""
    g.oauth = request.environ.get("tumblr_oauth.result")


@app.route("/login")
def login():
    result = client.flow().get_authorization_url_sync()
    if not result.ok:
        return jsonify({"error": str(result.error)}), 502
    return redirect(result.url)


@app.route("/callback")
def callback():
    result = g.oauth
    if not result or not result.ok:
        error = str(result.error) if result else "Middleware not configured"
        return jsonify({"authenticated": False, "error": error}), 401
    return jsonify({"authenticated": True, "user": result.user})


@app.route("/me")
def me():
    try:
        user = client.me_sync()
    except OAuthError as e:
        return jsonify({"error": str(e)}), 401
    return jsonify({"user": user.json})


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8010)

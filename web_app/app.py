# web_app/app.py
import os

from flask import Flask, request, jsonify, Response

from lunchwidget.debug_config import debug_bp
from web_app.widget_api import bp as widget_api_bp

# ---- Flask app ----
app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev")

# --- Auth exemptions (must be defined before password_gate) ---
EXEMPT_PATHS = {
    "/healthz",
}


@app.before_request
def password_gate():
    required = os.environ.get("APP_PASSWORD")
    if not required:
        return  # gate disabled when no password configured
    p = request.path
    if request.method == "HEAD" or p in EXEMPT_PATHS:
        return
    auth = request.authorization
    expected_user = os.environ.get("APP_USER")  # optional
    if auth and ((expected_user is None or auth.username == expected_user) and auth.password == required):
        return
    return Response(
        "Authentication required", 401, {"WWW-Authenticate": 'Basic realm="LunchMoneyWidget"'}
    )


# ---- Blueprints (widget API + debug) ----
app.register_blueprint(widget_api_bp)
app.register_blueprint(debug_bp)

app.logger.info("[Config] Using WIDGET_CLOUD_DIR=%s", os.environ.get("WIDGET_CLOUD_DIR"))


@app.get("/healthz")
def healthz():
    return jsonify(ok=True), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "5000")), debug=False)

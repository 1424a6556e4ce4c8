import secrets
from flask import request, jsonify, current_app

def issue_csrf_token(resp):
    token = secrets.token_urlsafe(32)
    resp.set_cookie(
        current_app.config.get("CSRF_COOKIE_NAME", "csrf_token"),
        token,
        httponly=False,  # read by client JS and echoed in the header
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp

def require_csrf():
    if not current_app.config.get("CSRF_ENABLED", True):
        return None
    cookie_token = request.cookies.get(current_app.config.get("CSRF_COOKIE_NAME", "csrf_token"))
    header_token = request.headers.get(current_app.config.get("CSRF_HEADER_NAME", "X-CSRF-Token"))
    if not cookie_token or not header_token or not secrets.compare_digest(cookie_token, header_token):
        return jsonify(error="CSRF validation failed"), 403
    return None

from flask import Blueprint, jsonify

from security.csrf import issue_csrf_token

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(status="ok"), 200


@health_bp.get("/csrf-token")
def csrf_token():
    # double-submit cookie; echo the value back in X-CSRF-Token
    resp = jsonify(message="CSRF cookie issued")
    return issue_csrf_token(resp), 200

"""Flask edge proxy exposing the Acure Scan auth and scan API."""

from __future__ import annotations

import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

import requests
from flask import Flask, Response, jsonify, request

from acure_cli.core.config import DEFAULT_ALLOWED_ORIGINS, resolve_firebase_api_key
from acure_cli.proxy.cors import cors_headers
from acure_cli.proxy.firebase import FirebaseClient, FirebaseError
from acure_cli.proxy.firestore import document_to_scan, scan_to_fields

logger = logging.getLogger(__name__)

REGISTER_MESSAGES = [
    ("email_exists", "Email already registered"),
    ("invalid_email", "Invalid email address"),
    ("weak_password", "Password should be at least 6 characters"),
]

LOGIN_MESSAGES = [
    ("invalid_email", "Invalid email address"),
    ("user_disabled", "This account has been disabled"),
    ("email_not_found", "No account found with this email"),
    ("invalid_password", "Incorrect password"),
    ("invalid_credential", "Invalid email or password"),
]

ENDPOINTS = {
    "register": "POST /api/auth/register",
    "login": "POST /api/auth/login",
    "logout": "POST /api/auth/logout",
    "verify": "GET /api/auth/verify",
    "scans": "GET|POST /api/scans",
    "scan": "GET|DELETE /api/scans/<scanId>",
    "test": "GET /test",
    "health": "GET /health",
}

_BASE36 = string.digits + string.ascii_lowercase

ViewResult = Union[Response, Tuple[Response, int]]


def friendly_message(code: str, table: list, default: str) -> str:
    lowered = (code or "").lower()
    for needle, message in table:
        if needle in lowered:
            return message
    return default


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_id() -> str:
    """Millisecond timestamp in base36 followed by random base36 characters."""
    suffix = "".join(random.choices(_BASE36, k=11))
    return _to_base36(int(time.time() * 1000)) + suffix


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):] or None


def _fail(status: int, error: str, **extra: Any) -> Tuple[Response, int]:
    body: Dict[str, Any] = {"success": False, "error": error}
    body.update(extra)
    return jsonify(body), status


def create_app(config: Optional[Dict[str, Any]] = None, firebase: Optional[FirebaseClient] = None) -> Flask:
    """Build the proxy application.

    ``firebase`` defaults to a client built from ``config["proxy"]``.
    """
    config = config or {}
    proxy_cfg = config.get("proxy", {})
    allowed_origins = list(proxy_cfg.get("allowed_origins") or DEFAULT_ALLOWED_ORIGINS)
    strict_cors = bool(proxy_cfg.get("strict_cors", False))

    if firebase is None:
        firebase = FirebaseClient(
            api_key=resolve_firebase_api_key(config),
            project_id=str(proxy_cfg.get("project_id") or "acurescan"),
            timeout_seconds=float(proxy_cfg.get("timeout_seconds", 15)),
        )

    app = Flask(__name__)
    app.config["FIREBASE"] = firebase

    @app.before_request
    def preflight() -> Optional[Response]:
        if request.method == "OPTIONS":
            return Response(status=200)
        return None

    @app.after_request
    def apply_cors(response: Response) -> Response:
        for key, value in cors_headers(request.headers.get("Origin"), allowed_origins, strict_cors).items():
            response.headers[key] = value
        return response

    @app.errorhandler(404)
    def not_found(_error: Exception) -> ViewResult:
        return jsonify({"error": "Endpoint not found", "available_endpoints": list(ENDPOINTS.values())}), 404

    @app.errorhandler(500)
    def internal_error(_error: Exception) -> ViewResult:
        return _fail(500, "Internal server error")

    @app.route("/", methods=["GET"])
    def index() -> ViewResult:
        return jsonify({"message": "Acure Scan API is running!", "endpoints": ENDPOINTS})

    @app.route("/health", methods=["GET"])
    def health() -> ViewResult:
        return jsonify({"status": "OK", "timestamp": _now_iso()})

    @app.route("/test", methods=["GET"])
    def test_route() -> ViewResult:
        return jsonify({"message": "API is working!", "timestamp": _now_iso()})

    @app.route("/api/auth/register", methods=["POST"])
    def register() -> ViewResult:
        body = request.get_json(silent=True) or {}
        email = str(body.get("email") or "")
        password = str(body.get("password") or "")
        name = body.get("name")
        try:
            data = firebase.sign_up(email, password)
        except FirebaseError as exc:
            return jsonify({"error": friendly_message(exc.code, REGISTER_MESSAGES, "Registration failed")}), 400
        except Exception:
            logger.exception("Registration failed")
            return jsonify({"error": "Registration failed"}), 500
        return (
            jsonify(
                {
                    "success": True,
                    "data": {
                        "uid": data.get("localId"),
                        "email": data.get("email"),
                        "name": name,
                        "token": data.get("idToken"),
                    },
                }
            ),
            201,
        )

    @app.route("/api/auth/login", methods=["POST"])
    def login() -> ViewResult:
        body = request.get_json(silent=True) or {}
        try:
            data = firebase.sign_in(str(body.get("email") or ""), str(body.get("password") or ""))
        except FirebaseError as exc:
            return jsonify({"error": friendly_message(exc.code, LOGIN_MESSAGES, "Login failed")}), 401
        except Exception:
            logger.exception("Login failed")
            return jsonify({"error": "Login failed"}), 500
        return jsonify(
            {
                "success": True,
                "data": {"uid": data.get("localId"), "email": data.get("email"), "token": data.get("idToken")},
            }
        )

    @app.route("/api/auth/logout", methods=["POST"])
    def logout() -> ViewResult:
        return jsonify({"success": True, "message": "Logout successful"})

    @app.route("/api/auth/verify", methods=["GET"])
    def verify() -> ViewResult:
        token = _bearer_token()
        if not token:
            return _fail(401, "No token provided")
        try:
            user = firebase.lookup(token)
        except FirebaseError as exc:
            return _fail(401, exc.code or "Token verification failed")
        except Exception:
            logger.exception("Token verification failed")
            return _fail(500, "Internal server error")
        return jsonify({"success": True, "data": {"uid": user.get("localId"), "email": user.get("email")}})

    def authorize(user_id: str) -> Union[str, Tuple[Response, int]]:
        """Return the bearer token when it belongs to ``user_id``, else an error response."""
        token = _bearer_token()
        if not token:
            return _fail(401, "No token provided")
        try:
            user = firebase.lookup(token)
        except FirebaseError:
            return _fail(401, "Invalid token")
        except requests.RequestException:
            logger.exception("Token lookup failed")
            return _fail(500, "Internal server error")
        if user.get("localId") != user_id:
            return _fail(403, "Unauthorized access")
        return token

    @app.route("/api/scans", methods=["GET"])
    def list_scans() -> ViewResult:
        user_id = request.args.get("userId")
        if not user_id:
            return _fail(400, "User ID is required")
        token = authorize(user_id)
        if not isinstance(token, str):
            return token
        try:
            documents = firebase.list_scans(user_id, token)
        except Exception as exc:
            logger.exception("Error fetching scans")
            return _fail(500, "Internal server error", message=str(exc))
        now = _now_iso()
        scans = [document_to_scan(doc, user_id, now) for doc in documents]
        logger.info("Scans found for %s: %d", user_id, len(scans))
        return jsonify({"success": True, "data": scans})

    @app.route("/api/scans", methods=["POST"])
    def create_scan() -> ViewResult:
        body = request.get_json(silent=True) or {}
        scan_data = dict(body)
        user_id = scan_data.pop("userId", None)
        if _bearer_token() is None:
            return _fail(401, "No token provided")
        if not user_id:
            return _fail(400, "User ID is required")
        token = authorize(str(user_id))
        if not isinstance(token, str):
            return token

        scan_id = generate_id()
        fields = scan_to_fields(scan_id, str(user_id), scan_data, _now_iso())
        try:
            firebase.create_scan(str(user_id), token, scan_id, fields)
        except FirebaseError as exc:
            logger.error("Firestore save error: %s", exc.code)
            return _fail(500, "Failed to save scan", details=exc.code)
        except Exception as exc:
            logger.exception("Error saving scan")
            return _fail(500, "Internal server error", message=str(exc))
        return jsonify({"success": True, "data": dict(scan_data, id=scan_id, scanId=scan_id)}), 201

    @app.route("/api/scans/<scan_id>", methods=["GET"])
    def get_scan(scan_id: str) -> ViewResult:
        user_id = request.args.get("userId")
        if not user_id or not scan_id:
            return _fail(400, "User ID and Scan ID are required")
        token = authorize(user_id)
        if not isinstance(token, str):
            return token
        try:
            document = firebase.get_scan(user_id, token, scan_id)
        except FirebaseError:
            return _fail(500, "Failed to fetch scan")
        except Exception as exc:
            logger.exception("Error fetching scan")
            return _fail(500, "Internal server error", message=str(exc))
        if document is None:
            return _fail(404, "Scan not found")
        scan = document_to_scan(dict(document, name=scan_id), user_id, _now_iso())
        return jsonify({"success": True, "data": scan})

    @app.route("/api/scans/<scan_id>", methods=["DELETE"])
    def delete_scan(scan_id: str) -> ViewResult:
        user_id = request.args.get("userId")
        if not user_id:
            return _fail(400, "User ID is required")
        token = authorize(user_id)
        if not isinstance(token, str):
            return token
        try:
            deleted = firebase.delete_scan(user_id, token, scan_id)
        except FirebaseError:
            return _fail(500, "Failed to delete scan")
        except Exception as exc:
            logger.exception("Error deleting scan")
            return _fail(500, "Internal server error", message=str(exc))
        if not deleted:
            return _fail(404, "Scan not found")
        return jsonify({"success": True})

    return app


def serve(config: Dict[str, Any], host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the proxy with Flask's development server."""
    level = str(config.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))
    proxy_cfg = config.get("proxy", {})
    app = create_app(config)
    if not resolve_firebase_api_key(config):
        logger.warning("No Firebase API key configured; auth calls will fail")
    app.run(host=host or proxy_cfg.get("host", "127.0.0.1"), port=int(port or proxy_cfg.get("port", 8787)))

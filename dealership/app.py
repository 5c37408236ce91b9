# app.py — Ben Davis Automotive Flask backend
from __future__ import annotations

import os
import secrets
from datetime import datetime
from typing import Any, Dict

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException, NotFound

from .auth import auth_bp
from .config import Config, logger
from .dashboard import dashboard_bp
from .dialogue import ChatRequest, ChatResponse, detect_speaker_switch, handle_turn
from .images import images_bp
from .personas import DEFAULT_PERSONA, PERSONAS, PersonaId
from .turn_logger import log_turn
from .utils import current_request_id, sanitize_user_input

# ---------------- Flask setup ----------------
app = Flask(__name__, static_folder=Config.STATIC_DIR, static_url_path="")
app.config.from_object(Config)

app.config["MAX_CONTENT_LENGTH"] = 1 * 1024 * 1024  # 1MB, chat and login bodies only
app.json.sort_keys = False

default_origins = [
    "http://localhost",
    "http://localhost:*",
    "http://127.0.0.1",
    "http://127.0.0.1:*",
]
CORS(app,
     origins=default_origins + Config.ALLOWED_ORIGINS,
     methods=["GET", "POST", "OPTIONS"],
     allow_headers=["Content-Type", "Authorization"],
     expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
     supports_credentials=True,
     max_age=3600)

limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=["1000 per hour", "100 per minute"],
    storage_uri="memory://",
    strategy="fixed-window",
    enabled=Config.RATE_LIMIT_ENABLED,
)

limiter.limit("10 per minute")(auth_bp)
limiter.limit("5 per minute")(images_bp)
app.register_blueprint(auth_bp)
app.register_blueprint(dashboard_bp)
app.register_blueprint(images_bp)


# --------------- Metrics ---------------
class SystemMetrics:
    def __init__(self):
        self.request_count = 0
        self.error_count = 0
        self.chat_count = 0
        self.switch_count = 0
        self.fallback_count = 0
        self.chats_by_persona: Dict[str, int] = {p.value: 0 for p in PersonaId}
        self.start_time = datetime.now()
        self.last_error = None

    def record_request(self): self.request_count += 1
    def record_error(self, error: str):
        self.error_count += 1; self.last_error = {"message": str(error), "timestamp": datetime.now().isoformat()}
    def record_chat(self, speaker: PersonaId, switched: bool, fallback: bool):
        self.chat_count += 1
        self.chats_by_persona[speaker.value] += 1
        if switched: self.switch_count += 1
        if fallback: self.fallback_count += 1
    def get_metrics(self) -> Dict[str, Any]:
        uptime = (datetime.now() - self.start_time).total_seconds()
        return {
            "uptime_seconds": uptime,
            "total_requests": self.request_count,
            "total_errors": self.error_count,
            "total_chats": self.chat_count,
            "chats_by_persona": dict(self.chats_by_persona),
            "speaker_switches": self.switch_count,
            "fallback_replies": self.fallback_count,
            "last_error": self.last_error,
            "error_rate": self.error_count / max(self.request_count, 1),
            "average_requests_per_minute": (self.request_count / max(uptime, 1)) * 60,
        }

metrics = SystemMetrics()


# --------------- Middleware / Errors ---------------
@app.before_request
def before_request_handler():
    metrics.record_request()
    request.request_id = secrets.token_hex(8)
    logger.info("Request: %s %s from %s", request.method, request.path, request.remote_addr)
    if request.method == "POST" and request.content_length:
        if request.mimetype != "application/json":
            logger.warning("Invalid content type: %s", request.content_type)
            return jsonify({"error": "Content-Type must be application/json"}), 400
    return None

@app.after_request
def after_request_handler(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-Request-ID"] = current_request_id()
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:; "
        "font-src 'self'; connect-src 'self'"
    )
    return response

@app.errorhandler(429)
def handle_rate_limit(e):
    return jsonify({"error": "Rate limit exceeded. Please try again later.", "retry_after": e.description, "request_id": current_request_id()}), 429

@app.errorhandler(Exception)
def handle_exception(e):
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description, "request_id": current_request_id()}), e.code
    logger.error("Unhandled exception: %s", e, exc_info=True)
    metrics.record_error(str(e))
    if app.config.get("DEBUG"):
        return jsonify({"error": str(e), "type": type(e).__name__, "request_id": current_request_id()}), 500
    return jsonify({"error": "An internal error occurred", "request_id": current_request_id()}), 500


# --------------- Health & Static ---------------
@app.route("/favicon.ico")
def favicon(): return "", 204

@app.route("/health", methods=["GET"])
@limiter.exempt
def health_check():
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat(), "version": Config.APP_VERSION}), 200

@app.route("/metrics", methods=["GET"])
@limiter.exempt
def system_metrics():
    return jsonify(metrics.get_metrics()), 200

@app.route("/")
@limiter.exempt
def serve_index():
    try:
        return send_from_directory(Config.STATIC_DIR, "index.html")
    except NotFound:
        return jsonify({"error": "Frontend not found"}), 404


# --------------- Web Chat ---------------
@app.route("/api/chat", methods=["POST"])
@limiter.limit("60 per minute")
def web_chat():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid request body"}), 400

    message = data.get("message")
    if message is not None and not isinstance(message, str):
        return jsonify({"error": "message must be a string"}), 400
    user_input = sanitize_user_input(message or "", max_length=None)
    if not user_input:
        return jsonify({"error": "No message provided"}), 400

    try:
        speaker = PersonaId.parse(data.get("speaker") or DEFAULT_PERSONA.value)
    except ValueError:
        return jsonify({"error": "Unknown speaker"}), 400

    try:
        result = handle_turn(ChatRequest(message=user_input, speaker=speaker))
    except Exception as e:
        # Keep the conversation going; the switch decision still stands.
        logger.error("Error in web chat: %s", e, exc_info=True)
        metrics.record_error(str(e))
        result = ChatResponse(
            response=PERSONAS[PersonaId.BEN].fallback_response,
            switch_speaker=detect_speaker_switch(speaker, user_input),
            fallback=True,
        )

    metrics.record_chat(speaker, result.switch_speaker is not None, result.fallback)
    log_turn(
        current_request_id(),
        speaker.value,
        result.switch_speaker.value if result.switch_speaker else None,
        result.fallback,
        user_input,
        result.response,
    )
    return jsonify(result.to_dict()), 200


# --------------- Startup ---------------
def initialize_application():
    logger.info("=" * 60)
    logger.info("Starting %s backend v%s", Config.APP_NAME, Config.APP_VERSION)
    logger.info("Static directory: %s", Config.STATIC_DIR)
    logger.info("Debug mode: %s", Config.DEBUG)
    logger.info("Chat model: %s (temperature=%s, max_tokens=%s)", Config.OPENAI_MODEL, Config.AI_TEMPERATURE, Config.AI_MAX_TOKENS)
    if not Config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; chat and image routes will serve fallbacks")
    os.makedirs(Config.STATIC_DIR, exist_ok=True)
    logger.info("=" * 60)


if __name__ == "__main__":
    initialize_application()
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG, threaded=True, use_reloader=Config.DEBUG)

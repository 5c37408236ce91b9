# auth.py — dashboard login, signed session cookie, route guards
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Iterable, Optional

from flask import Blueprint, current_app, g, jsonify, redirect, request, send_from_directory
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.exceptions import NotFound
from werkzeug.security import check_password_hash, generate_password_hash

from .config import Config, logger

auth_bp = Blueprint("auth_bp", __name__)

SESSION_SALT = "auth-session"


@dataclass(frozen=True)
class User:
    username: str
    name: str
    password_hash: str

    def public(self) -> Dict[str, str]:
        return {"username": self.username, "name": self.name}


class UserStore(ABC):
    """Lookup + password check for dashboard users."""

    @abstractmethod
    def get(self, username: str) -> Optional[User]:
        ...

    def verify(self, username: str, password: str) -> Optional[User]:
        user = self.get(username)
        if user is None or not isinstance(password, str):
            return None
        if not check_password_hash(user.password_hash, password):
            return None
        return user


class InMemoryUserStore(UserStore):
    def __init__(self, users: Iterable[User] = ()):
        self._users: Dict[str, User] = {u.username: u for u in users}

    def add(self, username: str, name: str, password: str) -> User:
        user = User(username, name, generate_password_hash(password))
        self._users[username] = user
        return user

    def get(self, username: str) -> Optional[User]:
        return self._users.get(username)

    def __len__(self) -> int:
        return len(self._users)


def _dashboard_password_hash() -> str:
    if Config.DASHBOARD_PASSWORD_HASH:
        return Config.DASHBOARD_PASSWORD_HASH
    if Config.IS_PRODUCTION:
        raise ValueError("DASHBOARD_PASSWORD_HASH must be set in production environment")
    logger.warning("Hashing DASHBOARD_PASSWORD at startup - set DASHBOARD_PASSWORD_HASH for production")
    return generate_password_hash(Config.DASHBOARD_PASSWORD)


def build_default_store() -> InMemoryUserStore:
    password_hash = _dashboard_password_hash()
    return InMemoryUserStore(User(u, name, password_hash) for u, name in Config.DASHBOARD_USERS)


user_store: UserStore = build_default_store()


# ---- Session cookie ----
def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=SESSION_SALT)


def make_session_token(user: User) -> str:
    return _serializer().dumps({"username": user.username, "name": user.name, "loggedIn": True})


def load_session(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=Config.AUTH_SESSION_MAX_AGE)
    except SignatureExpired:
        logger.info("Expired dashboard session cookie")
        return None
    except BadSignature:
        logger.warning("Rejected dashboard session cookie with bad signature from %s", request.remote_addr)
        return None
    if not isinstance(data, dict) or data.get("loggedIn") is not True:
        return None
    return data


def current_session() -> Optional[Dict[str, Any]]:
    return load_session(request.cookies.get(Config.AUTH_COOKIE_NAME))


def _guard(view_func, on_missing):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        session = current_session()
        if session is None:
            return on_missing()
        g.user = {"username": session.get("username"), "name": session.get("name")}
        return view_func(*args, **kwargs)
    return wrapper


def login_required(view_func):
    """Pages: bounce to /login without a valid session."""
    return _guard(view_func, lambda: redirect("/login"))


def api_login_required(view_func):
    return _guard(view_func, lambda: (jsonify({"error": "Authentication required"}), 401))


# ---- Routes ----
@auth_bp.route("/login", methods=["GET"])
def login_page():
    try:
        return send_from_directory(Config.STATIC_DIR, "login.html")
    except NotFound:
        return jsonify({"error": "Login page not found"}), 404


@auth_bp.route("/api/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid request body"}), 400
    username = data.get("username") or ""
    password = data.get("password") or ""

    if not isinstance(username, str) or not isinstance(password, str):
        return jsonify({"error": "Username and password must be strings"}), 400
    username = username.strip()
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    user = user_store.verify(username, password)
    if user is None:
        logger.warning("Failed login for %r from %s", username, request.remote_addr)
        return jsonify({"error": "Invalid username or password"}), 401

    logger.info("User %s logged in", user.username)
    resp = jsonify({"success": True, "user": user.public()})
    resp.set_cookie(
        Config.AUTH_COOKIE_NAME,
        make_session_token(user),
        max_age=Config.AUTH_SESSION_MAX_AGE,
        httponly=True,
        secure=Config.AUTH_COOKIE_SECURE,
        samesite="Lax",
        path="/",
    )
    return resp


@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    resp = jsonify({"success": True})
    resp.set_cookie(
        Config.AUTH_COOKIE_NAME,
        "",
        max_age=0,
        httponly=True,
        secure=Config.AUTH_COOKIE_SECURE,
        samesite="Lax",
        path="/",
    )
    return resp


@auth_bp.route("/api/auth/session", methods=["GET"])
@api_login_required
def session_info():
    return jsonify({"loggedIn": True, "user": g.user})

# auth_server/managers/auth_management.py
from datetime import datetime, timezone
from functools import wraps

from flask import session, current_app
from pymongo.errors import DuplicateKeyError
from werkzeug.security import check_password_hash, generate_password_hash

from .mongodb_management import get_mongodb
from .response_management import ResponseManager
from ..constants.constants_mongodb import MongoDBCollection, MongoDBFilters


def public_user(doc: dict) -> dict:
    """Strip a users document down to what may leave the server."""
    created_at = doc.get("created_at")
    return {
        "id": str(doc.get("_id")),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "created_at": created_at.isoformat() if isinstance(created_at, datetime) else created_at,
    }


class AuthenticationManager:
    MIN_PASSWORD_LENGTH = 6

    @classmethod
    def _users(cls):
        return get_mongodb().get_collection(MongoDBCollection.USERS)

    @classmethod
    def register_user(cls, name, email, password):
        if not name or not email or not password:
            return ResponseManager.bad_request("Missing name, email or password")

        if len(password) < cls.MIN_PASSWORD_LENGTH:
            return ResponseManager.bad_request(
                f"Password must be at least {cls.MIN_PASSWORD_LENGTH} characters"
            )

        users = cls._users()
        email_filter = MongoDBFilters.User.by_email(email)

        if users.find_one(email_filter, {"_id": 1}) is not None:
            current_app.logger.debug(f"register rejected, email exists: '{email}'")
            return ResponseManager.conflict("Email already registered")

        document = {
            "name": name,
            "email": email_filter["email"],
            "password_hash": generate_password_hash(password),
            "created_at": datetime.now(timezone.utc),
        }

        try:
            users.insert_one(document)
        except DuplicateKeyError:
            # lost a race against a concurrent register
            return ResponseManager.conflict("Email already registered")

        current_app.logger.info(f"registered user '{document['email']}'")
        return ResponseManager.created(data=public_user(document), message="User created")

    @classmethod
    def authenticate_login(cls, email, password):
        user = cls._users().find_one(MongoDBFilters.User.by_email(email))

        stored_hash = (user or {}).get("password_hash")
        if not stored_hash or not check_password_hash(stored_hash, password):
            current_app.logger.debug(f"unauthorized login attempt for '{email}'")
            return ResponseManager.unauthorized("Invalid credentials")

        return ResponseManager.success(data=public_user(user))

    @classmethod
    def get_user(cls, user_id):
        id_filter = MongoDBFilters.by_id(user_id)
        if id_filter is None:
            return None

        user = cls._users().find_one(id_filter)
        return public_user(user) if user else None


class AuthorizationManager:
    @classmethod
    def regenerate_session(cls):
        """Start a fresh session so a pre-login cookie cannot be reused."""
        session.clear()
        session.permanent = True
        session.modified = True

    @classmethod
    def logout(cls):
        session.clear()

    @classmethod
    def login_required(cls, func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if cls.is_logged_out():
                current_app.logger.debug("require_login failed")
                return ResponseManager.unauthorized("Please log in first")
            return func(*args, **kwargs)

        return wrapper

    @classmethod
    def get_login_context(cls):
        return session.get("login_context", None)

    @classmethod
    def set_login_context(cls, ctx: dict = None):
        if not ctx:
            session.pop("login_context", None)
            return
        cls.regenerate_session()
        session["login_context"] = ctx.copy()

    @classmethod
    def is_logged_in(cls):
        return cls.get_login_context() is not None

    @classmethod
    def is_logged_out(cls):
        return not cls.is_logged_in()

    @classmethod
    def get_user_context(cls):
        ctx = cls.get_login_context()
        return ctx.get("user", {}) if ctx else {}

    @classmethod
    def get_user_id(cls):
        if user_ctx := cls.get_user_context():
            return user_ctx.get("id", None)
        else:
            return None

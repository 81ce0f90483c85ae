# auth_server/routes/auth.py
import uuid
from flask import Blueprint, current_app

from ..managers.response_management import ResponseManager
from ..managers.json_management import JSONBodyParser
from ..managers.auth_management import AuthenticationManager, AuthorizationManager
from ..constants.constants_server import LoginStatus


auth_bp = Blueprint("auth", __name__)


def _field(data: dict, key: str, strip: bool = True) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip() if strip else value


# ---------------- AUTH ROUTES ---------------- #


@auth_bp.route("/register", methods=["POST"])
def register():
    data = JSONBodyParser.get_body()

    return AuthenticationManager.register_user(
        name=_field(data, "name"),
        email=_field(data, "email"),
        password=_field(data, "password", strip=False),
    )


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    JSON login endpoint.
    On success the login context lives in the signed session cookie.
    """
    data = JSONBodyParser.get_body()
    email = _field(data, "email")
    password = _field(data, "password", strip=False)

    if not email or not password:
        current_app.login_metrics.labels(status=LoginStatus.FAILURE_MISSING_DATA).inc()
        return ResponseManager.bad_request("Missing email or password")

    valid_login_res = AuthenticationManager.authenticate_login(email, password)
    if not ResponseManager.is_success(response=valid_login_res):
        current_app.login_metrics.labels(status=LoginStatus.FAILURE_CREDENTIALS).inc()
        return valid_login_res

    user = ResponseManager.get_data(valid_login_res)
    AuthorizationManager.set_login_context(
        ctx={"user": user, "session_id": str(uuid.uuid4())}
    )
    current_app.login_metrics.labels(status=LoginStatus.SUCCESS).inc()
    current_app.logger.info(f"user '{user['email']}' logged in")

    return ResponseManager.success(data={"user": user}, message="Logged in")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    AuthorizationManager.logout()
    return ResponseManager.success(message="Logged out")


@auth_bp.route("/me", methods=["GET"])
@AuthorizationManager.login_required
def me():
    user = AuthenticationManager.get_user(AuthorizationManager.get_user_id())
    if user is None:
        # account removed since login
        AuthorizationManager.logout()
        return ResponseManager.unauthorized("Please log in first")

    return ResponseManager.success(data={"user": user})

"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from socialconnect.api.deps import (
    json_body,
    json_response,
    require_auth,
    service_context,
    timing,
    token_service,
)
from socialconnect.schemas import (
    ChangePasswordSchema,
    LoginSchema,
    LogoutSchema,
    PasswordResetConfirmSchema,
    PasswordResetRequestSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
    UsernameQuerySchema,
    dump_profile,
)
from socialconnect.services.auth.dto import (
    LoginIn,
    PasswordChangeIn,
    PasswordResetConfirmIn,
    RegisterIn,
    TokenClaims,
)
from socialconnect.services.auth.service import AuthService

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
change_password_schema = ChangePasswordSchema()
reset_request_schema = PasswordResetRequestSchema()
reset_confirm_schema = PasswordResetConfirmSchema()
username_query_schema = UsernameQuerySchema()
user_schema = UserSchema()
token_schema = TokenResponseSchema()

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def _service(claims: TokenClaims | None = None) -> AuthService:
    return AuthService(token_service(), ctx=service_context(claims))


@bp.post("/register")
@timing
def register():
    """Register a new account and return its representation."""

    data = register_schema.load(json_body())
    user = _service().register(RegisterIn(**data))
    return json_response(
        {"message": "User registered successfully", "user": user_schema.dump(user)}, status=201
    )


@bp.post("/login")
@timing
def login():
    """Authenticate by email or username and issue an access/refresh pair."""

    data = login_schema.load(json_body())
    result = _service().login(LoginIn(identifier=data["identifier"], password=data["password"]))
    user = user_schema.dump(result.user)
    user.update(
        followers_count=result.stats.followers_count,
        following_count=result.stats.following_count,
        posts_count=result.stats.posts_count,
    )
    return json_response(
        {
            "message": "Login successful",
            "user": user,
            "access_token": result.access_token,
            "refresh_token": result.refresh_token,
            "token_type": "bearer",
        }
    )


@bp.post("/token/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access token."""

    data = refresh_schema.load(json_body())
    out = _service().refresh(data["refresh_token"])
    return json_response(token_schema.dump(out))


@bp.post("/logout")
@require_auth
@timing
def logout(claims: TokenClaims):
    """Blacklist the refresh token supplied in the body."""

    data = logout_schema.load(json_body())
    _service(claims).logout(claims.user_id, data["refresh_token"])
    return json_response({"message": "Logged out successfully"})


@bp.post("/change-password")
@require_auth
@timing
def change_password(claims: TokenClaims):
    """Change the password and sign out every session of the caller."""

    data = change_password_schema.load(json_body())
    _service(claims).change_password(
        claims.user_id,
        PasswordChangeIn(
            current_password=data["current_password"], new_password=data["new_password"]
        ),
    )
    return json_response(
        {"message": "Password changed successfully. Please log in again on other devices."}
    )


@bp.get("/check-username")
@timing
def check_username():
    """Report whether a username is well-formed and free."""

    data = username_query_schema.load(request.args)
    out = _service().username_availability(data["username"])
    body: dict[str, object] = {"available": out.available}
    if out.error:
        body["error"] = out.error
    return json_response(body)


@bp.post("/password-reset")
@timing
def password_reset():
    """
    Start a password reset.

    The answer never reveals whether the address exists. The token is only
    echoed back when ``PASSWORD_RESET_EXPOSE_TOKEN`` is enabled (development).
    """

    data = reset_request_schema.load(json_body())
    token = _service().request_password_reset(data["email"])
    body: dict[str, object] = {"message": RESET_REQUESTED_MESSAGE}
    if token and current_app.config.get("PASSWORD_RESET_EXPOSE_TOKEN", False):
        body["reset_token"] = token
    return json_response(body)


@bp.post("/password-reset/confirm")
@timing
def password_reset_confirm():
    """Set a new password with a reset token; all refresh tokens are revoked."""

    data = reset_confirm_schema.load(json_body())
    _service().confirm_password_reset(PasswordResetConfirmIn(**data))
    return json_response(
        {"message": "Password reset successfully. Please log in with your new password."}
    )


@bp.get("/me")
@require_auth
@timing
def me(claims: TokenClaims):
    """Return the authenticated user with relationship counts."""

    profile = _service(claims).whoami(claims.user_id)
    return json_response(dump_profile(profile))

"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from sessionauth.api.deps import (
    get_account_service,
    json_response,
    timing,
    translate_service_errors,
)
from sessionauth.api.session import (
    clear_credentials,
    current_subject,
    issue_credentials,
    require_session,
)
from sessionauth.schemas import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginSchema,
    OneTimeTokenQuerySchema,
    RegisterSchema,
    ResetPasswordSchema,
    UserSchema,
)
from sessionauth.services.accounts import AuthResult, LoginIn, PasswordChangeIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
forgot_schema = ForgotPasswordSchema()
reset_schema = ResetPasswordSchema()
change_schema = ChangePasswordSchema()
token_query_schema = OneTimeTokenQuerySchema()
user_schema = UserSchema()


def _signed_in(result: AuthResult, *, message: str, status: int = 200):
    issue_credentials(result.pair)
    body = {"message": message, "data": user_schema.dump(result.user)}
    return json_response(body, status=status)


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
@translate_service_errors
def register():
    """Register a new user, send the verification token and sign in."""

    data = register_schema.load(_json_body())
    result = get_account_service().register(RegisterIn(**data))
    return _signed_in(
        result, message="Verification email sent. Please verify your email.", status=201
    )


@bp.post("/login")
@timing
@translate_service_errors
def login():
    """Authenticate credentials and issue the credential cookies."""

    data = login_schema.load(_json_body())
    result = get_account_service().login(LoginIn(**data))
    return _signed_in(result, message="Logged in")


@bp.get("/verify-email")
@timing
@translate_service_errors
def verify_email():
    """Consume a verification token and sign the user in."""

    query = token_query_schema.load(request.args)
    result = get_account_service().verify_email(query["token"])
    return _signed_in(result, message="Email verified successfully!")


@bp.post("/forgot-password")
@timing
@translate_service_errors
def forgot_password():
    """Send a reset token when the email is registered; never reveal which."""

    data = forgot_schema.load(_json_body())
    get_account_service().forgot_password(data["email"])
    return json_response(
        {"message": "If your email is registered, you will receive a reset link"}
    )


@bp.post("/reset-password")
@timing
@translate_service_errors
def reset_password():
    """Consume a reset token, set the new password and sign in."""

    query = token_query_schema.load(request.args)
    data = reset_schema.load(_json_body())
    result = get_account_service().reset_password(query["token"], data["password"])
    return _signed_in(result, message="Password reset successful")


@bp.post("/change-password")
@require_session
@timing
@translate_service_errors
def change_password():
    """Replace the password; every older credential stops working."""

    data = change_schema.load(_json_body())
    result = get_account_service().change_password(
        current_subject().subject_id, PasswordChangeIn(**data)
    )
    return _signed_in(result, message="Password changed successfully")


@bp.route("/logout", methods=["GET", "POST"])
@require_session
@timing
@translate_service_errors
def logout():
    """Drop the refresh record and expire both cookies."""

    get_account_service().logout(current_subject().subject_id)
    clear_credentials()
    return json_response({"message": "Logged out successfully"})


@bp.get("/me")
@require_session
@timing
@translate_service_errors
def me():
    """Return the authenticated user profile."""

    user = get_account_service().get_user(current_subject().subject_id)
    return json_response({"data": user_schema.dump(user)})

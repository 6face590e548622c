"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginSchema,
    OneTimeTokenQuerySchema,
    RegisterSchema,
    ResetPasswordSchema,
    RevokeSessionSchema,
    UserSchema,
)

__all__ = [
    "ChangePasswordSchema",
    "ForgotPasswordSchema",
    "LoginSchema",
    "OneTimeTokenQuerySchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "RevokeSessionSchema",
    "UserSchema",
]

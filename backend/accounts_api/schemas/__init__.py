"""Convenience exports for application schemas."""

from __future__ import annotations

from .account import AccountSchema, ChangePasswordSchema, RegisterFormSchema
from .auth import LoginResponseSchema, LoginSchema, RefreshSchema, TokenPairSchema

__all__ = [
    "AccountSchema",
    "ChangePasswordSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterFormSchema",
    "TokenPairSchema",
]

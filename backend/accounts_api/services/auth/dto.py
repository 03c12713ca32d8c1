from __future__ import annotations

from dataclasses import dataclass

from accounts_api.services.identity.dto import AccountPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. At least one identifier is required.

    :param password: Raw password (to be verified).
    :type password: str | None
    :param username: Username, trimmed before lookup.
    :type username: str | None
    :param email: Email, trimmed and lower-cased before lookup.
    :type email: str | None
    """

    password: str | None
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Refresh token from the cookie or the body.
    :type refresh_token: str | None
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param account_id: Account resolved by the auth guard.
    :type account_id: int
    :param access_token: Presented access token, denylisted when given.
    :type access_token: str | None
    """

    account_id: int
    access_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access and refresh tokens minted together.

    :param access_token: Short-lived access JWT.
    :type access_token: str
    :param refresh_token: Long-lived refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    :param account: Sanitized account.
    :type account: AccountPublicOut
    :param tokens: Freshly issued pair.
    :type tokens: TokenPairOut
    """

    account: AccountPublicOut
    tokens: TokenPairOut

"""
AuthService
===========

Session lifecycle for existing accounts:

- Login by username or email, issuing an access/refresh token pair and
  storing the refresh token on the account row.
- Refresh rotation guarded by a compare-and-swap on the stored token.
- Logout clearing the stored refresh token and denylisting the presented
  access token until it expires.
"""

from __future__ import annotations

import hmac
import logging
from datetime import UTC, datetime

from accounts_api.repositories.account import AccountRepository
from accounts_api.services._shared.base import BaseService, ServiceContext
from accounts_api.services._shared.errors import (
    AuthError,
    NotFoundError,
    TokenInvalidError,
    ValidationError,
)
from accounts_api.services._shared.policies.validation import ensure_email
from accounts_api.services._shared.ports import TokenDenylistStore, TokenKind, TokenProvider
from accounts_api.services._shared.result import Result
from accounts_api.services.auth.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from accounts_api.services.identity.dto import AccountPublicOut

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    The refresh token currently valid for an account is the one stored on its
    row: rotation overwrites it with a compare-and-swap, logout clears it.
    Access tokens are stateless; logout denylists the presented one by ``jti``.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore | None = None,
        mask_unknown_account: bool = False,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param token_provider: Adapter issuing/verifying JWTs.
        :param denylist_store: Revoked access-token store; logout skips it when ``None``.
        :param mask_unknown_account: Report unknown identifiers as bad credentials.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.denylist = denylist_store
        self.mask_unknown_account = mask_unknown_account

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> Result[LoginOut]:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: ``Success(LoginOut)`` or ``Failure`` with ``ValidationError``,
            ``NotFoundError`` or ``AuthError``.
        """
        return self.run("auth.login", lambda: self._login(dto))

    def _login(self, dto: LoginIn) -> LoginOut:
        username = (dto.username or "").strip()
        email = (dto.email or "").strip()
        if not username and not email:
            raise ValidationError("Username or email is required")
        if not dto.password:
            raise ValidationError("Password is required")
        if email:
            email = ensure_email(email)

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.find_by_username_or_email(username, email)
            if account is None:
                if self.mask_unknown_account:
                    raise AuthError(INVALID_CREDENTIALS)
                raise NotFoundError("User", username or email)
            if not account.verify_password(dto.password):
                raise AuthError(INVALID_CREDENTIALS)

            tokens = self._issue_pair(account.id)
            repo.update_fields(account.id, refresh_token=tokens.refresh_token)
            out = LoginOut(
                account=AccountPublicOut.from_model(account),
                tokens=tokens,
            )

        log.info("auth.login", extra={"account_id": out.account.id})
        return out

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> Result[TokenPairOut]:
        """
        Rotate the refresh token and emit a new pair.

        :param dto: Refresh input.
        :returns: ``Success(TokenPairOut)`` or ``Failure`` with ``AuthError``
            or ``TokenInvalidError``.
        """
        return self.run("auth.refresh", lambda: self._refresh(dto))

    def _refresh(self, dto: RefreshIn) -> TokenPairOut:
        presented = (dto.refresh_token or "").strip()
        if not presented:
            raise AuthError("Unauthorized request")

        account_id = self.tokens.verify(presented, TokenKind.REFRESH)

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.find_by_id(account_id, exclude_sensitive=False)
            if account is None:
                raise AuthError("Invalid refresh token")
            stored = account.refresh_token or ""
            if not hmac.compare_digest(stored.encode(), presented.encode()):
                raise AuthError("Refresh token is expired or used")

            tokens = self._issue_pair(account.id)
            if not repo.swap_refresh_token(account.id, presented, tokens.refresh_token):
                # a concurrent refresh rotated it first
                raise AuthError("Refresh token is expired or used")

        log.info("auth.refresh", extra={"account_id": account_id})
        return tokens

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> Result[None]:
        """
        Clear the stored refresh token and denylist the presented access token.

        :param dto: Logout input.
        :returns: ``Success(None)`` (idempotent) or ``Failure(InternalError)``.
        """
        return self.run("auth.logout", lambda: self._logout(dto))

    def _logout(self, dto: LogoutIn) -> None:
        with self.rw_uow() as uow:
            uow.accounts.update_fields(dto.account_id, refresh_token=None)

        if dto.access_token and self.denylist is not None:
            try:
                claims = self.tokens.decode(dto.access_token, TokenKind.ACCESS)
            except TokenInvalidError:
                claims = None
            if claims is not None:
                self.denylist.revoke_jti(
                    jti=str(claims["jti"]),
                    expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
                )
        log.info("auth.logout", extra={"account_id": dto.account_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, account_id: int) -> TokenPairOut:
        return TokenPairOut(
            access_token=self.tokens.issue_access_token(account_id),
            refresh_token=self.tokens.issue_refresh_token(account_id),
        )

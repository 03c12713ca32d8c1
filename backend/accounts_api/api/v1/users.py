"""Account endpoints: registration, session tokens and profile media."""

from __future__ import annotations

from flask import Blueprint, g, request

from accounts_api.api.cookies import REFRESH_COOKIE, clear_token_cookies, set_token_cookies
from accounts_api.api.deps import (
    auth_service,
    identity_service,
    json_response,
    registration_service,
    require_auth,
    staged_uploads,
    timing,
)
from accounts_api.schemas import (
    AccountSchema,
    ChangePasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterFormSchema,
    TokenPairSchema,
)
from accounts_api.services import (
    AccountRegistrationIn,
    LoginIn,
    LogoutIn,
    MediaUpdateIn,
    PasswordChangeIn,
    RefreshIn,
)

bp = Blueprint("users", __name__)

register_schema = RegisterFormSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
account_schema = AccountSchema()
token_pair_schema = TokenPairSchema()
login_response_schema = LoginResponseSchema()


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with ``avatar`` and optional ``coverImage``."""

    form = register_schema.load(request.form.to_dict())
    service = registration_service()
    with staged_uploads("avatar", "coverImage") as files:
        result = service.register(
            AccountRegistrationIn(
                fullname=form["fullname"],
                email=form["email"],
                username=form["username"],
                password=form["password"],
                avatar_path=files["avatar"],
                cover_image_path=files["coverImage"],
            )
        )
    account = service.unwrap(result)
    return json_response(account_schema.dump(account), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    data = login_schema.load(request.get_json(silent=True) or {})
    service = auth_service()
    out = service.unwrap(service.login(LoginIn(**data)))
    body = login_response_schema.dump(
        {
            "account": out.account,
            "access_token": out.tokens.access_token,
            "refresh_token": out.tokens.refresh_token,
        }
    )
    response = json_response(body, "User logged in successfully")
    return set_token_cookies(
        response,
        access_token=out.tokens.access_token,
        refresh_token=out.tokens.refresh_token,
    )


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token from the cookie, or from the JSON body as a fallback."""

    presented = request.cookies.get(REFRESH_COOKIE)
    if not presented:
        presented = refresh_schema.load(request.get_json(silent=True) or {})["refresh_token"]
    service = auth_service()
    tokens = service.unwrap(service.refresh(RefreshIn(refresh_token=presented)))
    response = json_response(token_pair_schema.dump(tokens), "Access token refreshed")
    return set_token_cookies(
        response,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@bp.post("/logout")
@require_auth
@timing
def logout():
    service = auth_service()
    service.unwrap(service.logout(LogoutIn(account_id=g.account_id, access_token=g.access_token)))
    return clear_token_cookies(json_response({}, "User logged out"))


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(request.get_json(silent=True) or {})
    service = identity_service()
    service.unwrap(
        service.change_password(
            PasswordChangeIn(
                account_id=g.account_id,
                old_password=data["old_password"],
                new_password=data["new_password"],
            )
        )
    )
    return json_response({}, "Password changed successfully")


@bp.get("/current-user")
@require_auth
@timing
def current_user():
    service = identity_service()
    account = service.unwrap(service.get_account(g.account_id))
    return json_response(account_schema.dump(account), "Current user fetched successfully")


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    service = identity_service()
    with staged_uploads("avatar") as files:
        result = service.update_avatar(
            MediaUpdateIn(account_id=g.account_id, local_path=files["avatar"])
        )
    account = service.unwrap(result)
    return json_response(account_schema.dump(account), "Avatar updated successfully")


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    service = identity_service()
    with staged_uploads("coverImage") as files:
        result = service.update_cover_image(
            MediaUpdateIn(account_id=g.account_id, local_path=files["coverImage"])
        )
    account = service.unwrap(result)
    return json_response(account_schema.dump(account), "Cover image updated successfully")

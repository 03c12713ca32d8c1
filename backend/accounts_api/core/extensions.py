"""Global Flask extension instances and collaborator wiring."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from accounts_api.core.config import parse_duration

if TYPE_CHECKING:  # pragma: no cover
    from accounts_api.infra.jwt.pyjwt_token_provider import TokenConfig
    from accounts_api.services._shared.ports import (
        MediaStore,
        TokenDenylistStore,
        TokenProvider,
    )

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
redis_client: redis.Redis | None = None

TOKEN_PROVIDER_KEY = "token_provider"
MEDIA_STORE_KEY = "media_store"
DENYLIST_KEY = "token_denylist"


def build_token_config(config: Mapping[str, Any]) -> TokenConfig:
    """Translate flat Flask config keys into a :class:`TokenConfig`."""
    from accounts_api.infra.jwt.pyjwt_token_provider import TokenConfig

    return TokenConfig(
        access_secret=config["ACCESS_TOKEN_SECRET"],
        refresh_secret=config["REFRESH_TOKEN_SECRET"],
        access_expires=parse_duration(config.get("ACCESS_TOKEN_EXPIRY", "15m")),
        refresh_expires=parse_duration(config.get("REFRESH_TOKEN_EXPIRY", "10d")),
        algorithm=config.get("JWT_ALGORITHM", "HS256"),
    )


def build_media_store(config: Mapping[str, Any]) -> MediaStore:
    """Return the Cloudinary adapter, or an in-memory store when unconfigured."""
    from accounts_api.infra.media.cloudinary_media_store import (
        CloudinaryMediaStore,
        MediaStoreConfig,
    )
    from accounts_api.services._shared.ports import InMemoryMediaStore

    cloud_name = config.get("CLOUDINARY_CLOUD_NAME")
    if not cloud_name:
        current_app.logger.warning("media_store.in_memory: CLOUDINARY_CLOUD_NAME is not set")
        return InMemoryMediaStore()
    return CloudinaryMediaStore(
        MediaStoreConfig(
            cloud_name=cloud_name,
            api_key=config["CLOUDINARY_API_KEY"],
            api_secret=config["CLOUDINARY_API_SECRET"],
            timeout=float(config.get("MEDIA_STORE_TIMEOUT", 30)),
        )
    )


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, Redis and the service collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`accounts_api.models` package to ensure SQLAlchemy metadata is
        ready for migrations. Collaborators already present in
        ``app.extensions`` (e.g. test doubles) are left untouched.
    """
    from accounts_api.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
    from accounts_api.infra.redis.redis_denylist_store import RedisTokenDenylistStore
    from accounts_api.services._shared.ports import InMemoryDenylistStore

    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from accounts_api import models as _models  # noqa: F401

    migrate.init_app(app, db)

    if TOKEN_PROVIDER_KEY not in app.extensions:
        app.extensions[TOKEN_PROVIDER_KEY] = PyJWTTokenProvider(build_token_config(app.config))
    if MEDIA_STORE_KEY not in app.extensions:
        with app.app_context():
            app.extensions[MEDIA_STORE_KEY] = build_media_store(app.config)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        app.extensions.setdefault(DENYLIST_KEY, InMemoryDenylistStore())
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client
    app.extensions.setdefault(DENYLIST_KEY, RedisTokenDenylistStore(redis_client))


def get_token_provider() -> TokenProvider:
    """Return the token issuer bound to the current application."""
    return cast("TokenProvider", current_app.extensions[TOKEN_PROVIDER_KEY])


def get_media_store() -> MediaStore:
    """Return the media store bound to the current application."""
    return cast("MediaStore", current_app.extensions[MEDIA_STORE_KEY])


def get_denylist() -> TokenDenylistStore:
    """Return the access-token denylist bound to the current application."""
    return cast("TokenDenylistStore", current_app.extensions[DENYLIST_KEY])

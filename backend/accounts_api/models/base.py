"""Reusable SQLAlchemy mixins shared by the mapped models (typed 2.0)."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Both are filled by the database; ``updated_at`` is refreshed on every
    ORM or Core ``UPDATE`` issued through the mapped table.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class PKMixin:
    """Integer surrogate primary key named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    """Provide a concise ``__repr__`` with the id plus ``__repr_attrs__``."""

    __repr_attrs__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        parts = [f"id={getattr(self, 'id', None)}"]
        # only loaded attributes; never trigger a lazy load from repr
        loaded = self.__dict__
        parts.extend(f"{name}={loaded[name]!r}" for name in self.__repr_attrs__ if name in loaded)
        return f"<{cls} {' '.join(parts)}>"

from __future__ import annotations

import logging
import os
from contextlib import suppress
from dataclasses import dataclass
from itertools import count
from typing import Protocol

from accounts_api.services._shared.errors import UploadError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """
    A file held by the remote media store.

    :param id: Store-assigned public id, used for deletion.
    :type id: str
    :param url: HTTPS retrieval URL persisted on the account.
    :type url: str
    :param resource_kind: Store resource type (``image``, ``video``, ``raw``).
    :type resource_kind: str
    """

    id: str
    url: str
    resource_kind: str = "image"


class MediaStore(Protocol):
    """
    Port for the remote media store.

    ``upload`` always removes the local file, whatever the outcome, and raises
    :class:`UploadError` on failure. ``delete`` never raises: failures are
    logged and reported as ``False``.
    """

    def upload(self, local_path: str) -> MediaAsset: ...
    def delete(self, media_id: str, resource_kind: str = "image") -> bool: ...


def discard_local_file(local_path: str) -> None:
    """Remove a staged upload; a file that is already gone is fine."""
    with suppress(FileNotFoundError):
        os.remove(local_path)


class InMemoryMediaStore:
    """
    Media store double keeping assets in a dict.

    Set ``fail_uploads_after`` to make the N+1th upload fail (``0`` fails the
    first one); ``uploads``/``deletes`` record calls for assertions.
    """

    def __init__(self, *, base_url: str = "https://media.local") -> None:
        self.base_url = base_url.rstrip("/")
        self.assets: dict[str, MediaAsset] = {}
        self.uploads: list[str] = []
        self.deletes: list[str] = []
        self.fail_uploads_after: int | None = None
        self._ids = count(1)

    def upload(self, local_path: str) -> MediaAsset:
        try:
            if not local_path or not os.path.isfile(local_path):
                raise UploadError("Local file does not exist")
            if self.fail_uploads_after is not None and len(self.uploads) >= self.fail_uploads_after:
                raise UploadError("Media store rejected the upload")
            media_id = f"asset-{next(self._ids)}"
            asset = MediaAsset(
                id=media_id,
                url=f"{self.base_url}/image/upload/{media_id}{os.path.splitext(local_path)[1]}",
            )
            self.assets[media_id] = asset
            self.uploads.append(media_id)
            log.info("media.uploaded", extra={"media_id": media_id})
            return asset
        finally:
            discard_local_file(local_path)

    def delete(self, media_id: str, resource_kind: str = "image") -> bool:
        self.deletes.append(media_id)
        return self.assets.pop(media_id, None) is not None

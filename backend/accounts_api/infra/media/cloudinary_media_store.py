"""Cloudinary adapter for the media store port, over the official SDK."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from accounts_api.services._shared.errors import UploadError
from accounts_api.services._shared.ports import MediaAsset, discard_local_file

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MediaStoreConfig:
    """
    Cloudinary credentials and call settings.

    :param cloud_name: Cloudinary cloud name.
    :type cloud_name: str
    :param api_key: API key sent with every signed call.
    :type api_key: str
    :param api_secret: API secret used only to sign, never sent.
    :type api_secret: str
    :param timeout: Per-call timeout in seconds.
    :type timeout: float
    """

    cloud_name: str
    api_key: str
    api_secret: str
    timeout: float = 30.0


class CloudinaryMediaStore:
    """
    Upload and destroy assets with ``cloudinary.uploader``.

    ``upload`` uses ``resource_type="auto"`` so images, videos and raw files
    are accepted; the store decides the resource kind and reports it back.
    """

    def __init__(self, config: MediaStoreConfig) -> None:
        self.config = config
        cloudinary.config(
            cloud_name=config.cloud_name,
            api_key=config.api_key,
            api_secret=config.api_secret,
            secure=True,
        )

    def upload(self, local_path: str) -> MediaAsset:
        """Push a local file; the file is removed whether or not this succeeds.

        :raises UploadError: Missing file, SDK failure or malformed response.
        """
        try:
            if not local_path or not os.path.isfile(local_path):
                raise UploadError("Local file does not exist")
            try:
                body = cloudinary.uploader.upload(
                    local_path,
                    resource_type="auto",
                    timeout=self.config.timeout,
                )
            except CloudinaryError as exc:
                log.error("media.upload_rejected: %s", exc)
                raise UploadError("Media store rejected the upload") from exc
            except Exception as exc:
                log.error("media.upload_failed: %s", exc)
                raise UploadError("Media store is unreachable") from exc
            asset = self._to_asset(body)
            log.info(
                "media.uploaded",
                extra={"media_id": asset.id, "resource_kind": asset.resource_kind},
            )
            return asset
        finally:
            discard_local_file(local_path)

    @staticmethod
    def _to_asset(body: object) -> MediaAsset:
        if not isinstance(body, Mapping):
            raise UploadError("Unexpected media store response")
        public_id = body.get("public_id")
        url = body.get("secure_url") or body.get("url")
        if not public_id or not url:
            raise UploadError("Unexpected media store response")
        return MediaAsset(
            id=str(public_id),
            url=str(url),
            resource_kind=str(body.get("resource_type") or "image"),
        )

    def delete(self, media_id: str, resource_kind: str = "image") -> bool:
        """Destroy an asset. Failures are logged and reported as ``False``."""
        if not media_id:
            return False
        try:
            body = cloudinary.uploader.destroy(
                media_id,
                resource_type=resource_kind,
                timeout=self.config.timeout,
            )
        except Exception as exc:
            log.warning("media.delete_failed: %s", exc, extra={"media_id": media_id})
            return False
        result = body.get("result") if isinstance(body, Mapping) else None
        if result != "ok":
            log.warning("media.delete_failed: result=%s", result, extra={"media_id": media_id})
            return False
        log.info("media.deleted", extra={"media_id": media_id, "resource_kind": resource_kind})
        return True

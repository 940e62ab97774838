"""Hand rendered images to an external host and get back a locator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from receipt_relay.config import UploadConfig
from receipt_relay.errors import UploadError
from receipt_relay.utils.logging import get_logger

log = get_logger(__name__)


class Uploader(ABC):
    @abstractmethod
    async def upload(self, data: bytes, media_type: str, file_name: str) -> str: ...

    async def close(self) -> None:
        """Clean up resources. Override if needed."""


class HttpUploader(Uploader):
    """Multipart POST to ``config.url``; the response JSON carries the locator."""

    def __init__(self, config: UploadConfig, client: httpx.AsyncClient | None = None) -> None:
        if not config.url:
            raise ValueError("upload.url is required when uploads are enabled")
        self._config = config
        headers = {"Authorization": f"Bearer {config.token}"} if config.token else {}
        self._client = client or httpx.AsyncClient(timeout=config.timeout, headers=headers)

    async def upload(self, data: bytes, media_type: str, file_name: str) -> str:
        try:
            resp = await self._client.post(
                self._config.url,
                files={"file": (file_name, data, media_type)},
            )
        except httpx.HTTPError as e:
            log.warning("upload_request_error", error=str(e))
            raise UploadError(f"Upload request failed: {e}") from e

        if resp.status_code not in (200, 201):
            log.error("upload_rejected", status=resp.status_code, body=resp.text[:200])
            raise UploadError(f"Upload rejected with status {resp.status_code}")

        try:
            payload: Any = resp.json()
        except ValueError as e:
            raise UploadError("Upload response is not JSON") from e

        locator = _extract_locator(payload)
        if not locator:
            raise UploadError("Upload response has no url")
        log.info("image_uploaded", size=len(data), media_type=media_type)
        return locator

    async def close(self) -> None:
        await self._client.aclose()


def _extract_locator(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    url = payload.get("url")
    if not url and isinstance(payload.get("data"), dict):
        url = payload["data"].get("url")
    return str(url) if url else ""

from __future__ import annotations

import base64
from http import HTTPStatus

import requests

from ..pipeline.errors import BackgroundRemovalFailed
from ..pipeline.models import MediaAsset


class RemoveBgClient:
    def __init__(
        self,
        api_key: str,
        url: str = "https://api.remove.bg/v1.0/removebg",
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def remove_background(self, asset: MediaAsset) -> MediaAsset:
        if not self.api_key:
            raise BackgroundRemovalFailed("REMOVE_BG_API_KEY is not configured")
        payload = {
            "image_file_b64": base64.b64encode(asset.data).decode("ascii"),
            "size": "auto",
        }
        try:
            response = requests.post(
                self.url,
                json=payload,
                headers={"X-Api-Key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise BackgroundRemovalFailed(f"remove.bg request failed: {exc}") from exc

        if response.status_code != HTTPStatus.OK:
            raise BackgroundRemovalFailed(
                f"remove.bg failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
                raw_response=response.text[:500],
            )
        return MediaAsset(data=response.content, mimetype="image/png", filename="nobg.png")

"""Remote push delivery through the OneSignal REST API."""
from __future__ import annotations

import base64
import logging
from typing import Any

import aiohttp

from resto.core.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)

ONESIGNAL_API_URL = "https://onesignal.com/api/v1/notifications"


class OneSignalPushClient:
    """Sends pushes to users by external user id (the identity provider's uid)."""

    def __init__(
        self,
        app_id: str,
        rest_api_key: str,
        *,
        api_url: str = ONESIGNAL_API_URL,
        timeout_seconds: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self._app_id = app_id
        self._rest_api_key = rest_api_key
        self._api_url = api_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    def _auth_header(self) -> str:
        token = base64.b64encode(f"{self._rest_api_key}:".encode()).decode()
        return f"Basic {token}"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def send(
        self,
        external_user_ids: list[str],
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Push to the given users. Raises NotificationDeliveryError on failure."""
        if not external_user_ids:
            logger.debug("No user IDs provided, skipping push notification")
            return None

        payload = {
            "app_id": self._app_id,
            "include_external_user_ids": external_user_ids,
            "headings": {"en": title},
            "contents": {"en": message},
            "data": data or {},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": self._auth_header(),
        }

        session = await self._get_session()
        try:
            async with session.post(self._api_url, json=payload, headers=headers) as response:
                if response.status >= 300:
                    body = await response.text()
                    raise NotificationDeliveryError(
                        f"OneSignal API error: {response.status} - {body}"
                    )
                result = await response.json()
        except aiohttp.ClientError as e:
            raise NotificationDeliveryError(f"OneSignal request failed: {e}") from e

        logger.info(f"Push sent to {len(external_user_ids)} user(s): {title}")
        return result

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

"""Hipchat room notifications over the v2 REST API."""

from enum import Enum
from typing import Optional, Protocol

import httpx
from loguru import logger

from ..config import Config


class Color(str, Enum):
    """Hipchat message background colors."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    PURPLE = "purple"
    GRAY = "gray"
    RANDOM = "random"


class NotificationError(Exception):
    """Raised when a notification could not be delivered."""


class Notifier(Protocol):
    """Anything that can deliver a colored chat message."""

    async def notify(self, message: str, color: Color) -> None:
        """Deliver message."""


class NullNotifier:
    """Notifier that drops every message."""

    async def notify(self, message: str, color: Color) -> None:
        return None


class HipchatClient:
    """
    Posts room notifications to Hipchat.

    A client without a room or API key is unconfigured and silently drops
    messages.

    Attributes:
        room_id: Hipchat room to post to
        api_key: Room notification token
        hc_host: Hipchat API host
    """

    def __init__(
        self,
        room_id: Optional[str] = None,
        api_key: Optional[str] = None,
        hc_host: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.room_id = room_id if room_id is not None else Config.HIPCHAT_ROOM_ID
        self.api_key = api_key if api_key is not None else Config.HIPCHAT_API_KEY
        self.hc_host = hc_host or Config.HIPCHAT_HOST
        self._timeout = timeout or Config.NOTIFY_TIMEOUT
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.room_id and self.api_key)

    def notification_url(self) -> str:
        return f"https://{self.hc_host}/v2/room/{self.room_id}/notification"

    async def notify(self, message: str, color: Color) -> None:
        """
        Post message to the room.

        Raises:
            NotificationError: On transport failure or a non-2xx response
        """
        if not self.configured:
            logger.debug("Hipchat not configured, dropping notification")
            return

        payload = {
            "message": message,
            "color": Color(color).value,
            "notify": True,
            "message_format": "text",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.notification_url(),
                    params={"auth_token": self.api_key},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Hipchat returned {e.response.status_code} for room {self.room_id}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(f"Hipchat request failed: {e}") from e

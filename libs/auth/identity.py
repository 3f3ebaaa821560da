"""Client for the identity provider's admin API.

Only password updates go through here; sign-in itself is handled by our own
OTP flow and access tokens.
"""

import uuid
from typing import Optional

import httpx

from libs.common.config import Settings, get_settings
from libs.common.errors import UpstreamFailure
from libs.common.logging import get_logger

logger = get_logger(__name__)


class IdentityAdminClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    async def update_password(self, user_id: uuid.UUID, new_password: str) -> None:
        url = f"{self.settings.IDENTITY_ADMIN_URL.rstrip('/')}/admin/users/{user_id}"
        headers = {
            "apikey": self.settings.IDENTITY_SERVICE_KEY,
            "Authorization": f"Bearer {self.settings.IDENTITY_SERVICE_KEY}",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.put(
                    url, json={"password": new_password}, headers=headers
                )
        except httpx.TransportError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise UpstreamFailure("Identity provider unreachable") from e

        if not response.is_success:
            logger.error(
                "Identity provider rejected password update for %s: %d",
                user_id,
                response.status_code,
            )
            raise UpstreamFailure("Password update failed")


_identity_client: Optional[IdentityAdminClient] = None


def get_identity_client() -> IdentityAdminClient:
    global _identity_client
    if _identity_client is None:
        _identity_client = IdentityAdminClient()
    return _identity_client

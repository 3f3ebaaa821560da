"""
Outbound notification client for OTP and password-reset delivery.

Two providers are used:
- WhatsApp Cloud API template messages for phone OTPs
- SendGrid v3 mail send for email OTPs and password-reset links

Transport errors and 5xx responses are retried with exponential backoff up
to NOTIFICATION_MAX_ATTEMPTS; 4xx responses fail immediately. When the budget
is exhausted an UpstreamFailure is raised so the calling transaction can roll
back.

Usage:
    from libs.common.notifications import get_notification_client

    client = get_notification_client()
    await client.send_otp(contact="+919800000000", method="phone", code="123456")
"""

import asyncio
from typing import Any, Optional

import httpx
from libs.common.config import Settings, get_settings
from libs.common.errors import UpstreamFailure
from libs.common.logging import get_logger

logger = get_logger(__name__)

WHATSAPP_API_URL = "https://graph.facebook.com/v19.0/{phone_number_id}/messages"
SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class NotificationClient:
    """Async client for the WhatsApp and SendGrid HTTP APIs."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.timeout = self.settings.NOTIFICATION_TIMEOUT_SECONDS
        self.max_attempts = max(1, self.settings.NOTIFICATION_MAX_ATTEMPTS)
        self.backoff = self.settings.NOTIFICATION_RETRY_BACKOFF_SECONDS
        # Injected in tests (httpx.MockTransport)
        self._transport = transport

    async def _post(
        self, provider: str, url: str, headers: dict[str, str], payload: dict[str, Any]
    ) -> httpx.Response:
        last_error: Optional[str] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.post(url, json=payload, headers=headers)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning(
                    "%s request failed (attempt %d/%d): %s",
                    provider,
                    attempt,
                    self.max_attempts,
                    last_error,
                )
            else:
                if response.is_success:
                    return response
                last_error = f"HTTP {response.status_code}: {response.text[:200]}"
                if response.status_code < 500:
                    logger.error("%s rejected request: %s", provider, last_error)
                    break
                logger.warning(
                    "%s returned %d (attempt %d/%d)",
                    provider,
                    response.status_code,
                    attempt,
                    self.max_attempts,
                )

            if attempt < self.max_attempts:
                await asyncio.sleep(self.backoff * (2 ** (attempt - 1)))

        logger.error("%s delivery failed: %s", provider, last_error)
        raise UpstreamFailure(f"{provider} delivery failed")

    # =========================================================================
    # Providers
    # =========================================================================

    async def send_whatsapp_template(
        self, phone: str, template: str, parameters: list[str]
    ) -> None:
        url = WHATSAPP_API_URL.format(
            phone_number_id=self.settings.WHATSAPP_PHONE_NUMBER_ID
        )
        payload = {
            "messaging_product": "whatsapp",
            "to": phone,
            "type": "template",
            "template": {
                "name": template,
                "language": {"code": "en_US"},
                "components": [
                    {
                        "type": "body",
                        "parameters": [{"type": "text", "text": p} for p in parameters],
                    }
                ],
            },
        }
        headers = {"Authorization": f"Bearer {self.settings.WHATSAPP_TOKEN}"}
        await self._post("WhatsApp", url, headers, payload)

    async def send_email(self, to_email: str, subject: str, body: str) -> None:
        payload = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {
                "email": self.settings.EMAIL_FROM_ADDRESS,
                "name": self.settings.EMAIL_FROM_NAME,
            },
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        headers = {"Authorization": f"Bearer {self.settings.SENDGRID_API_KEY}"}
        await self._post("SendGrid", SENDGRID_API_URL, headers, payload)

    # =========================================================================
    # Messages
    # =========================================================================

    async def send_otp(self, contact: str, method: str, code: str) -> None:
        """Deliver a one-time code by WhatsApp (``phone``) or email."""
        if method == "phone":
            await self.send_whatsapp_template(
                contact, self.settings.WHATSAPP_OTP_TEMPLATE, [code]
            )
        else:
            await self.send_email(
                contact,
                "Your OTP Code",
                f"Your OTP code is: {code}",
            )
        logger.info("OTP delivered via %s", method)

    async def send_password_reset(self, email: str, reset_url: str) -> None:
        await self.send_email(
            email,
            f"Reset your {self.settings.EMAIL_FROM_NAME} password",
            f"Click the link to reset your password: {reset_url}\n"
            "If you did not request this, ignore this email.",
        )


_notification_client: Optional[NotificationClient] = None


def get_notification_client() -> NotificationClient:
    """Return the process-wide client (FastAPI dependency)."""
    global _notification_client
    if _notification_client is None:
        _notification_client = NotificationClient()
    return _notification_client

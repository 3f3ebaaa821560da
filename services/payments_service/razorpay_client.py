"""
Razorpay API client for checkout orders and payment signature checks.

Provides:
- Creating an order for the Razorpay checkout widget
- Verifying the signature Razorpay returns after a successful checkout
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RazorpayOrder:
    """Order created on Razorpay."""

    id: str
    amount: int  # in paise
    currency: str
    receipt: str
    status: str  # created, attempted, paid


class RazorpayError(Exception):
    """Base exception for Razorpay API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


def sign(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 of ``order_id|payment_id`` as Razorpay computes it."""
    body = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class RazorpayClient:
    """Async client for the Razorpay Orders API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.key_id = settings.RAZORPAY_KEY_ID
        self.key_secret = settings.RAZORPAY_KEY_SECRET
        self.base_url = settings.RAZORPAY_BASE_URL
        self.currency = settings.PAYMENT_CURRENCY
        # Injected in tests (httpx.MockTransport)
        self._transport = transport

    async def _request(
        self, method: str, endpoint: str, json_data: Optional[dict] = None
    ) -> dict:
        """Make an async request to the Razorpay API."""
        if not self.key_id or not self.key_secret:
            raise RazorpayError("Razorpay API keys are not configured")

        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(
                timeout=30.0, transport=self._transport
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    auth=(self.key_id, self.key_secret),
                    json=json_data,
                )
        except httpx.TransportError as e:
            logger.error("Razorpay request failed: %s", e)
            raise RazorpayError(f"Razorpay unreachable: {e}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            # Proxies in front of the gateway answer with HTML error pages
            data = {}
            if response.is_success:
                raise RazorpayError(
                    "Razorpay returned a non-JSON response",
                    status_code=response.status_code,
                )
        if not response.is_success:
            logger.error("Razorpay API error: %s - %s", response.status_code, data)
            error = data.get("error") or {}
            raise RazorpayError(
                message=error.get("description", "Unknown Razorpay error"),
                status_code=response.status_code,
                response_data=data,
            )
        return data

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self, amount: float, receipt: str, notes: Optional[dict] = None
    ) -> RazorpayOrder:
        """
        Create an order for the checkout widget.

        Args:
            amount: Amount in rupees; sent to Razorpay in paise
            receipt: Our reference (the payment id)
            notes: Free-form key/values shown on the Razorpay dashboard
        """
        payload = {
            "amount": to_paise(amount),
            "currency": self.currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": notes or {},
        }
        data = await self._request("POST", "/orders", json_data=payload)
        logger.info("Created Razorpay order %s for receipt %s", data["id"], receipt)
        return RazorpayOrder(
            id=data["id"],
            amount=data["amount"],
            currency=data["currency"],
            receipt=data.get("receipt", receipt),
            status=data.get("status", "created"),
        )

    # =========================================================================
    # Signatures
    # =========================================================================

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            raise RazorpayError("Razorpay API keys are not configured")
        expected = sign(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected.encode(), signature.encode())


_razorpay_client: Optional[RazorpayClient] = None


def get_razorpay_client() -> RazorpayClient:
    """Return the process-wide client (FastAPI dependency)."""
    global _razorpay_client
    if _razorpay_client is None:
        _razorpay_client = RazorpayClient()
    return _razorpay_client

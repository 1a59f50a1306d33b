"""
Payment Gateway Integration Services
Handles Stripe card charges and Africa's Talking M-Pesa mobile checkout
"""
import httpx
import logging
from typing import Dict, Optional, Any

import stripe

from app.core.config import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when a gateway rejects or cannot process a charge"""


class StripeService:
    """Stripe card payments"""

    def __init__(self, secret_key: str, currency: str = "usd"):
        """
        Initialize Stripe service

        Args:
            secret_key: Stripe secret key from dashboard
            currency: ISO currency code charges are made in
        """
        self.secret_key = secret_key
        self.currency = currency

    def charge(
        self,
        amount: float,
        payment_method_id: str,
        return_url: str,
        metadata: Optional[Dict] = None,
    ) -> Any:
        """
        Create and confirm a PaymentIntent in one call

        Args:
            amount: Amount in major units (converted to cents)
            payment_method_id: Stripe payment method (pm_...)
            return_url: Where Stripe sends the customer after 3DS
            metadata: Additional data to attach

        Returns:
            The PaymentIntent object (id, status, ...)
        """
        if not self.secret_key:
            raise PaymentGatewayError("Stripe is not configured")

        try:
            return stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=int(round(float(amount) * 100)),
                currency=self.currency,
                payment_method=payment_method_id,
                confirm=True,
                return_url=return_url,
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe charge error: {e}")
            raise PaymentGatewayError(f"Card payment failed: {e.user_message or str(e)}")


class AfricasTalkingPaymentsService:
    """Africa's Talking mobile checkout (M-Pesa STK push)"""

    def __init__(self, username: str, api_key: str, product_name: str, checkout_url: str):
        self.username = username
        self.api_key = api_key
        self.product_name = product_name
        self.checkout_url = checkout_url
        self.headers = {
            "apiKey": api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def mobile_checkout(
        self,
        phone_number: str,
        amount: float,
        currency: str = "KES",
        metadata: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        """
        Push a payment prompt to the customer's phone

        Returns:
            API response with status, description and transactionId
        """
        if not self.api_key:
            raise PaymentGatewayError("Africa's Talking payments are not configured")

        payload = {
            "username": self.username,
            "productName": self.product_name,
            "phoneNumber": phone_number,
            "currencyCode": currency,
            "amount": float(amount),
            "metadata": {k: str(v) for k, v in (metadata or {}).items()},
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.checkout_url,
                    json=payload,
                    headers=self.headers,
                    timeout=15.0
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"AT mobile checkout error: {e}")
            raise PaymentGatewayError(f"M-Pesa checkout failed: {str(e)}")

        if result.get("status") != "PendingConfirmation":
            logger.warning(f"AT mobile checkout rejected: {result}")
            raise PaymentGatewayError(result.get("description") or "M-Pesa checkout rejected")

        return result


def get_stripe_service() -> StripeService:
    return StripeService(settings.STRIPE_SECRET_KEY, settings.STRIPE_CURRENCY)


def get_mpesa_service() -> AfricasTalkingPaymentsService:
    return AfricasTalkingPaymentsService(
        username=settings.AT_USERNAME,
        api_key=settings.AT_API_KEY,
        product_name=settings.AT_PRODUCT_NAME,
        checkout_url=settings.AT_PAYMENTS_URL,
    )

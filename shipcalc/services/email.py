"""Quote emails through the EmailJS REST API"""
import logging
import secrets
import string
import time
from typing import Optional

import httpx

from shipcalc.core.config import settings
from shipcalc.core.exceptions import QuoteValidationError
from shipcalc.core.metrics import email_deliveries
from shipcalc.schemas.lead import EmailQuoteRequest, EmailQuoteResult

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_uppercase
NOT_SPECIFIED = "Not specified"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36[rem])
    return "".join(reversed(digits))


def generate_quote_id(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36) for _ in range(5))
    return f"QUOTE-{to_base36(now_ms)}-{suffix}"


def template_params(req: EmailQuoteRequest, quote_id: str) -> dict:
    shipping_date = req.shipping_date
    return {
        "to_name": req.name or "Customer",
        "to_email": req.email,
        "subject": "Vehicle Transport Price Quote",
        "quote_id": quote_id,
        "pickup": req.pickup,
        "delivery": req.delivery,
        "final_price": f"{req.final_price:.2f}",
        "transport_type": req.transport_type,
        "vehicle_type": req.vehicle_type,
        "vehicle_value": req.vehicle_value,
        "payment_method": req.payment_method or NOT_SPECIFIED,
        "date": (
            f"{shipping_date.month}/{shipping_date.day}/{shipping_date.year}"
            if shipping_date else NOT_SPECIFIED
        ),
        "distance": f"{req.distance:g}" if req.distance else NOT_SPECIFIED,
        "phone_number": req.phone,
    }


class QuoteMailer:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    @staticmethod
    def is_configured() -> bool:
        return bool(
            settings.EMAILJS_SERVICE_ID and settings.EMAILJS_TEMPLATE_ID and settings.EMAILJS_PUBLIC_KEY
        )

    async def send(self, req: EmailQuoteRequest) -> EmailQuoteResult:
        if not req.email.strip():
            raise QuoteValidationError("Email address is required", field="email")
        if req.final_price <= 0:
            raise QuoteValidationError("A calculated price is required", field="final_price")

        if not self.is_configured():
            logger.error("Missing EmailJS settings")
            email_deliveries.labels(status="not_configured").inc()
            return EmailQuoteResult(success=False, message="Email service is not properly configured.")

        quote_id = generate_quote_id()
        body = {
            "service_id": settings.EMAILJS_SERVICE_ID,
            "template_id": settings.EMAILJS_TEMPLATE_ID,
            "user_id": settings.EMAILJS_PUBLIC_KEY,
            "template_params": template_params(req, quote_id),
        }

        try:
            if self.client is not None:
                response = await self.client.post(settings.EMAILJS_URL, json=body)
            else:
                async with httpx.AsyncClient(timeout=settings.EMAIL_TIMEOUT) as client:
                    response = await client.post(settings.EMAILJS_URL, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"EmailJS send error for quote {quote_id}: {e}")
            email_deliveries.labels(status="failed").inc()
            return EmailQuoteResult(
                success=False,
                message="Failed to send email. Please check your email address and try again.",
                quote_id=quote_id,
            )

        email_deliveries.labels(status="sent").inc()
        logger.info(f"Quote {quote_id} emailed")
        return EmailQuoteResult(
            success=True,
            message=f"Price quote has been sent to your email! Quote ID: {quote_id}",
            quote_id=quote_id,
        )

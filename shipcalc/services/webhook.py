import httpx
import asyncio
import logging
import time
from typing import Optional

from pydantic import BaseModel

from shipcalc.core.config import settings
from shipcalc.core.metrics import crm_duration

logger = logging.getLogger(__name__)


class CRMDelivery(BaseModel):
    """Outcome of one CRM lead delivery; ``status_code`` is None if no response arrived."""
    status_code: Optional[int] = None
    error: Optional[str] = None
    body: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def reached_server(self) -> bool:
        """2xx or 5xx: the CRM saw the lead, so it must not be sent again."""
        return self.status_code is not None and (self.ok or self.status_code >= 500)


async def _post(client: httpx.AsyncClient, payload: dict) -> httpx.Response:
    return await client.post(settings.CRM_LEAD_URL, json=payload)


async def send_lead(
    payload: dict,
    retries: int | None = None,
    client: Optional[httpx.AsyncClient] = None,
) -> CRMDelivery:
    if not settings.CRM_LEAD_URL:
        logger.error("CRM lead endpoint is not configured")
        return CRMDelivery(error="CRM endpoint not configured")

    if retries is None:
        retries = settings.CRM_RETRIES

    lead_id = payload.get("Id")
    backoff = 1.0
    delivery = CRMDelivery(error="not attempted")

    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            if client is not None:
                response = await _post(client, payload)
            else:
                async with httpx.AsyncClient(timeout=settings.CRM_TIMEOUT) as own_client:
                    response = await _post(own_client, payload)

            crm_duration.labels(status=str(response.status_code)).observe(time.time() - start_time)
            delivery = CRMDelivery(status_code=response.status_code, body=response.text)

            if delivery.ok:
                logger.info(f"CRM delivery succeeded for lead {lead_id}")
                return delivery
            logger.warning(
                f"CRM delivery failed (attempt {attempt}/{retries}): "
                f"Status {response.status_code} for lead {lead_id}"
            )
            if response.status_code < 500:
                # the CRM rejected the document, resending it will not help
                return delivery
        except httpx.TimeoutException:
            crm_duration.labels(status="timeout").observe(time.time() - start_time)
            if delivery.status_code is None:
                delivery = CRMDelivery(error="timeout")
            logger.warning(f"CRM timeout (attempt {attempt}/{retries}) for lead {lead_id}")
        except httpx.HTTPError as e:
            crm_duration.labels(status="error").observe(time.time() - start_time)
            if delivery.status_code is None:
                delivery = CRMDelivery(error=str(e) or e.__class__.__name__)
            logger.warning(
                f"CRM delivery error (attempt {attempt}/{retries}): {e} for lead {lead_id}"
            )

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    logger.error(f"CRM delivery failed after {retries} attempts for lead {lead_id}")
    return delivery

"""Lead submission: hash, dedup, CRM delivery"""
import logging
import uuid
from typing import Optional

import httpx

from shipcalc.core.metrics import lead_submissions
from shipcalc.schemas.lead import LeadCreate, LeadSubmissionResult
from shipcalc.services.lead_mapper import map_lead
from shipcalc.services.webhook import send_lead
from shipcalc.utils.hashing import calculation_hash
from shipcalc.utils.idempotency import HashStore, LeadDeduplicator

logger = logging.getLogger(__name__)


class LeadSubmissionService:
    def __init__(self, store: HashStore, client: Optional[httpx.AsyncClient] = None):
        self.store = store
        self.client = client

    async def submit(self, lead: LeadCreate, client_id: str) -> LeadSubmissionResult:
        """Submit at most once per calculation.

        The hash is recorded when the CRM answered 2xx, and also on 5xx:
        the lead may already have been stored there. 4xx and transport
        errors leave it unrecorded so the visitor can retry.
        """
        lead_hash = calculation_hash(**lead.hash_fields())
        dedup = LeadDeduplicator(self.store, client_id)

        if not await dedup.should_submit(lead_hash):
            lead_submissions.labels(outcome="duplicate").inc()
            logger.info(f"Lead {lead_hash} already submitted by {client_id}, skipping")
            return LeadSubmissionResult(
                success=True,
                message="Lead already submitted",
                calculation_hash=lead_hash,
                cached=True,
            )

        lead_id = str(uuid.uuid4())
        payload = map_lead(lead, lead_hash, lead_id)
        delivery = await send_lead(payload.model_dump(), client=self.client)

        if delivery.reached_server:
            await dedup.record_submitted(lead_hash)

        if delivery.ok:
            lead_submissions.labels(outcome="submitted").inc()
            return LeadSubmissionResult(
                success=True,
                message="Lead successfully submitted",
                lead_id=lead_id,
                calculation_hash=lead_hash,
            )

        lead_submissions.labels(outcome="failed").inc()
        if delivery.status_code is not None:
            message = f"CRM responded with status {delivery.status_code}"
        else:
            message = f"CRM request failed: {delivery.error}"
        logger.warning(f"Lead {lead_hash} not submitted: {message}")
        return LeadSubmissionResult(
            success=False,
            message=message,
            lead_id=lead_id,
            calculation_hash=lead_hash,
        )

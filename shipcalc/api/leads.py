from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from shipcalc.core.exceptions import QuoteValidationError
from shipcalc.core.rate_limit import rate_limited
from shipcalc.core.redis import get_redis
from shipcalc.schemas.lead import EmailQuoteRequest, EmailQuoteResult, LeadCreate, LeadSubmissionResult
from shipcalc.services.email import QuoteMailer
from shipcalc.services.leads import LeadSubmissionService
from shipcalc.services.tasks import submit_lead
from shipcalc.utils.hashing import calculation_hash
from shipcalc.utils.idempotency import HashStore, LeadDeduplicator, get_hash_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/leads", tags=["leads"])


def get_lead_hash_store() -> HashStore:
    return get_hash_store(get_redis())


def get_lead_service(store: HashStore = Depends(get_lead_hash_store)) -> LeadSubmissionService:
    return LeadSubmissionService(store)


def get_mailer() -> QuoteMailer:
    return QuoteMailer()


@router.post("/", response_model=LeadSubmissionResult)
async def create_lead(
    payload: LeadCreate,
    background: bool = Query(False),
    service: LeadSubmissionService = Depends(get_lead_service),
    client_id: str = Depends(rate_limited("lead")),
):
    if background:
        lead_hash = calculation_hash(**payload.hash_fields())
        try:
            submit_lead.delay(payload.model_dump(mode="json"), client_id)
            return LeadSubmissionResult(
                success=True,
                message="Lead queued for submission",
                calculation_hash=lead_hash,
                queued=True,
            )
        except Exception as e:
            logger.error(f"Failed to enqueue lead {lead_hash}, submitting inline: {e}")

    return await service.submit(payload, client_id)


@router.delete("/cache")
async def clear_lead_cache(
    store: HashStore = Depends(get_lead_hash_store),
    client_id: str = Depends(rate_limited("default")),
):
    await LeadDeduplicator(store, client_id).clear()
    return {"cleared": True}


@router.post("/email", response_model=EmailQuoteResult)
async def email_quote(
    req: EmailQuoteRequest,
    mailer: QuoteMailer = Depends(get_mailer),
    client_id: str = Depends(rate_limited("email")),
):
    try:
        return await mailer.send(req)
    except QuoteValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

import asyncio
import logging

from celery import Celery
from redis.asyncio import Redis

from shipcalc.core.config import settings
from shipcalc.schemas.lead import LeadCreate
from shipcalc.services.leads import LeadSubmissionService
from shipcalc.utils.idempotency import get_hash_store

logger = logging.getLogger(__name__)

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"shipcalc.services.tasks.submit_lead": {"queue": "leads"}}


async def submit_lead_async(lead_data: dict, client_id: str) -> dict:
    """Worker-side submission; each run owns its Redis connection and event loop."""
    lead = LeadCreate.model_validate(lead_data)
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        try:
            await redis.ping()
            store = get_hash_store(redis)
        except Exception as e:
            logger.warning(f"Redis unavailable in worker, dedup is process-local: {e}")
            store = get_hash_store(None)

        result = await LeadSubmissionService(store).submit(lead, client_id)
        return result.model_dump()
    finally:
        await redis.aclose()


@celery_app.task(bind=True, max_retries=3)
def submit_lead(self, lead_data: dict, client_id: str):
    try:
        return asyncio.run(submit_lead_async(lead_data, client_id))
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)

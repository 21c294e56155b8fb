"""Mail job queue backed by arq (Redis)."""

from typing import Protocol

import structlog
from arq import ArqRedis, create_pool
from arq.connections import RedisSettings

from linkup.core.modules.notification.models import MailJob

logger = structlog.get_logger(__name__)

SEND_OTP_MAIL_JOB = "send_otp_mail"


class MailQueue(Protocol):
    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def enqueue(self, job: MailJob) -> None: ...


class ArqMailQueue:
    """Enqueues mail jobs for the arq worker defined in linkup.worker."""

    def __init__(self, redis_url: str) -> None:
        self._settings = RedisSettings.from_dsn(redis_url)
        self._pool: ArqRedis | None = None

    async def open(self) -> None:
        self._pool = await create_pool(self._settings)
        logger.info("mail_queue_connected", host=self._settings.host, port=self._settings.port)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.aclose()
            self._pool = None

    async def enqueue(self, job: MailJob) -> None:
        if self._pool is None:
            raise RuntimeError("Mail queue is not open")
        queued = await self._pool.enqueue_job(SEND_OTP_MAIL_JOB, str(job.user_id), job.email, job.intent.value)
        logger.debug("mail_job_enqueued", job_id=queued.job_id if queued else None, user_id=job.user_id, intent=job.intent)

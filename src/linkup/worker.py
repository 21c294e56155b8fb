"""arq worker that delivers OTP mails queued by the API."""

from typing import Any
from uuid import UUID

import structlog
from arq import Retry, run_worker
from arq.connections import RedisSettings
from arq.worker import func

from linkup.config import Config
from linkup.core.core import Core
from linkup.core.modules.notification.models import MailIntent
from linkup.core.modules.notification.queue import SEND_OTP_MAIL_JOB
from linkup.logging import setup_logging

logger = structlog.get_logger(__name__)

MAX_TRIES = 5
RETRY_BASE_DELAY_SECONDS = 3


def retry_delay(job_try: int) -> int:
    """Exponential backoff: 3s, 6s, 12s, 24s."""
    return RETRY_BASE_DELAY_SECONDS * 2 ** (job_try - 1)


async def send_otp_mail(ctx: dict[str, Any], user_id: str, email: str, intent: str) -> None:
    core: Core = ctx["core"]
    job_try: int = ctx.get("job_try", 1)
    try:
        await core.services.auth.issue_and_send_otp(UUID(user_id), email, MailIntent(intent))
    except Exception as e:
        if job_try < MAX_TRIES:
            logger.warning("otp_mail_retry", email=email, intent=intent, job_try=job_try, error=str(e))
            raise Retry(defer=retry_delay(job_try)) from e
        logger.exception("otp_mail_failed", email=email, intent=intent, job_try=job_try)
        raise


async def startup(ctx: dict[str, Any]) -> None:
    core = Core.from_config(ctx["config"])
    await core.on_start()
    ctx["core"] = core
    logger.info("worker_started")


async def shutdown(ctx: dict[str, Any]) -> None:
    core: Core | None = ctx.get("core")
    if core is not None:
        await core.on_stop()
    logger.info("worker_stopped")


class WorkerSettings:
    """arq worker configuration. Redis settings and config are supplied by `main`."""

    functions = [func(send_otp_mail, name=SEND_OTP_MAIL_JOB)]
    on_startup = startup
    on_shutdown = shutdown
    max_tries = MAX_TRIES
    job_timeout = 60
    keep_result = 3600


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    run_worker(
        WorkerSettings,  # type: ignore[arg-type]
        redis_settings=RedisSettings.from_dsn(config.redis_url),
        ctx={"config": config},
    )


if __name__ == "__main__":
    main()

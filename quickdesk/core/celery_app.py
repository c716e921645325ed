import ssl

from celery import Celery

import quickdesk.db.base  # noqa: F401 models must be mapped before tasks load tickets
from quickdesk.core.config import settings

celery_app = Celery("quickdesk", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

celery_app.conf.update(
    accept_content=["json"],
    task_serializer="json",
    result_serializer="json",
    result_expires=3600,
    timezone="UTC",
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    # E-mail sends are slow and retried; one at a time per worker process
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

if settings.REDIS_URL.startswith("rediss://"):
    tls_options = {"ssl_cert_reqs": ssl.CERT_NONE}
    celery_app.conf.update(broker_use_ssl=tls_options, redis_backend_use_ssl=tls_options)

celery_app.autodiscover_tasks(["quickdesk.notifications"])

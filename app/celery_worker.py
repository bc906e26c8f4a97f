# app/celery_worker.py
from celery import Celery

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane explicite, zeby worker je zarejestrowal
celery_app.conf.imports = ("app.tasks.expire",)

celery_app.conf.beat_schedule = {
    "expire-abandoned-carts-hourly": {
        "task": "app.tasks.expire.expire_abandoned_carts_task",
        "schedule": 3600.0,  # co godzine
    },
}

celery_app.conf.timezone = "UTC"

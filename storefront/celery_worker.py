# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "storefront.tasks.expire",
    "storefront.services.notification_service",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "purge-guest-carts-every-hour": {
        "task": "storefront.tasks.expire.purge_guest_carts_task",
        "schedule": 3600.0,  # co godzine
    },
}

celery_app.conf.timezone = "UTC"

# ===== booking_api/tasks/notification_tasks.py =====
import logging

import httpx

from booking_api.config.celery_config import celery_app
from booking_api.config.settings import get_settings

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_user_notification(self, user_id: int, message: str):
    """
    Deliver a notification to the push gateway.

    Args:
        user_id: Recipient user id
        message: Text shown to the user
    """
    settings = get_settings()

    if not settings.NOTIFICATION_WEBHOOK_URL:
        logger.info(f"No notification gateway configured; user {user_id}: {message}")
        return {"status": "skipped", "user_id": user_id}

    try:
        response = httpx.post(
            settings.NOTIFICATION_WEBHOOK_URL,
            json={"user_id": user_id, "message": message},
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
        response.raise_for_status()

        logger.info(f"Notification delivered to user {user_id}")
        return {"status": "success", "user_id": user_id}

    except httpx.HTTPError as exc:
        logger.error(f"Failed to deliver notification to user {user_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )

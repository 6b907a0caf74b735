# ============================================================================
# booking_api/services/notification/notification_dispatcher.py
# ============================================================================
"""Fire-and-forget notifications to customers and business owners"""
import logging

from booking_api.tasks.notification_tasks import send_user_notification

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Interface: deliver ``message`` to ``user_id`` without waiting for it"""

    def notify(self, user_id: int, message: str) -> None:
        raise NotImplementedError


class CeleryNotificationDispatcher(NotificationDispatcher):
    """Queues delivery on the notifications worker"""

    def notify(self, user_id: int, message: str) -> None:
        send_user_notification.delay(user_id, message)
        logger.debug(f"Queued notification for user {user_id}")


class NullNotificationDispatcher(NotificationDispatcher):
    """Used when notifications are disabled"""

    def notify(self, user_id: int, message: str) -> None:
        logger.debug(f"Notifications disabled; dropping message for user {user_id}")


def notify_safely(dispatcher: NotificationDispatcher, user_id: int, message: str) -> bool:
    """
    Dispatch after a commit. Failures are logged and swallowed so they can
    never turn a committed booking into an error response.
    """
    try:
        dispatcher.notify(user_id, message)
        return True
    except Exception as exc:
        logger.error(f"Notification to user {user_id} failed: {exc}", exc_info=True)
        return False

"""Fire-and-forget notification side channel.

Ledger services call `NotificationDispatcher.dispatch(...)` only AFTER their store
transaction commits. Delivery failures are logged and swallowed; they never affect
the result of the ledger operation that triggered them.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from config.settings import settings
from src.cw_common.redis_client import get_redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    user_id: int
    type: str
    title: str
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    async def notify(self, notification: Notification) -> None: ...


class LogNotifier:
    """Default notifier: writes the notification to the application log."""

    async def notify(self, notification: Notification) -> None:
        logger.info(
            "notify user=%s type=%s title=%r",
            notification.user_id,
            notification.type,
            notification.title,
        )


class RedisNotifier:
    """Publishes JSON payloads on `notifications:<user_id>` for the delivery service."""

    async def notify(self, notification: Notification) -> None:
        redis = await get_redis()
        payload = json.dumps(
            {
                "user_id": notification.user_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "metadata": notification.metadata,
            },
            default=str,
        )
        await redis.publish(f"notifications:{notification.user_id}", payload)


class NotificationDispatcher:
    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notifier: Notifier = notifier or build_notifier(settings.NOTIFICATION_BACKEND)
        # Strong refs: the event loop only keeps weak references to tasks
        self._pending: set[asyncio.Task[None]] = set()

    def dispatch(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        notification = Notification(user_id, type, title, message, metadata or {})
        try:
            task = asyncio.get_running_loop().create_task(self._deliver(notification))
        except RuntimeError:
            logger.warning("No running loop; dropped notification for user %s", user_id)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self._notifier.notify(notification)
        except Exception:
            logger.exception(
                "Notification delivery failed: user=%s type=%s",
                notification.user_id,
                notification.type,
            )


def build_notifier(backend: str) -> Notifier:
    if backend == "redis":
        return RedisNotifier()
    return LogNotifier()


dispatcher = NotificationDispatcher()

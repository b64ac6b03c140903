"""Unit tests for the post-commit notification dispatcher."""

from unittest.mock import AsyncMock

import pytest

from src.cw_common.notifications import (
    LogNotifier,
    Notification,
    NotificationDispatcher,
    RedisNotifier,
    build_notifier,
)


async def test_dispatch_delivers_in_background() -> None:
    notifier = AsyncMock()
    dispatcher = NotificationDispatcher(notifier)

    dispatcher.dispatch(7, "deposit", "Deposit received", "$5.00 credited", {"transaction_id": 1})
    await dispatcher.drain()

    notifier.notify.assert_awaited_once_with(
        Notification(7, "deposit", "Deposit received", "$5.00 credited", {"transaction_id": 1})
    )


async def test_delivery_failure_is_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    notifier = AsyncMock()
    notifier.notify.side_effect = ConnectionError("redis down")
    dispatcher = NotificationDispatcher(notifier)

    dispatcher.dispatch(7, "deposit", "t", "m")
    await dispatcher.drain()

    assert "Notification delivery failed" in caplog.text


def test_dispatch_without_loop_is_dropped() -> None:
    notifier = AsyncMock()
    NotificationDispatcher(notifier).dispatch(7, "deposit", "t", "m")
    notifier.notify.assert_not_called()


def test_build_notifier() -> None:
    assert isinstance(build_notifier("redis"), RedisNotifier)
    assert isinstance(build_notifier("log"), LogNotifier)

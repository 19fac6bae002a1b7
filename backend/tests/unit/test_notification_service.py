"""
Unit tests for NotificationChannel.
"""
import logging
from unittest.mock import MagicMock

import pytest
from fastapi import BackgroundTasks

from tradesmen.lib.logging import correlation_id_var
from tradesmen.services.email_service import EmailDeliveryError, EmailService
from tradesmen.services.notification_service import NotificationChannel


@pytest.fixture
def email_service():
    return MagicMock(spec=EmailService)


@pytest.mark.unit
def test_disabled_channel_drops_notifications():
    channel = NotificationChannel(None)
    tasks = BackgroundTasks()

    scheduled = channel.notify_contact(tasks, "Jane", "jane@example.com", None, "Hello")

    assert channel.enabled is False
    assert scheduled is False
    assert tasks.tasks == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_contact_notification_runs_in_background(email_service):
    channel = NotificationChannel(email_service)
    tasks = BackgroundTasks()

    scheduled = channel.notify_contact(tasks, "Jane", "jane@example.com", "Tap", "Hello")

    assert scheduled is True
    email_service.send_contact_notification.assert_not_called()

    await tasks()

    email_service.send_contact_notification.assert_called_once_with(
        "Jane", "jane@example.com", "Tap", "Hello"
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_booking_notification_runs_in_background(email_service):
    channel = NotificationChannel(email_service)
    tasks = BackgroundTasks()

    channel.notify_booking(tasks, 5, "Jane", "jane@example.com", "plumbing")
    await tasks()

    email_service.send_booking_notification.assert_called_once_with(
        5, "Jane", "jane@example.com", "plumbing", None, None
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_delivery_failure_is_swallowed(email_service, caplog):
    email_service.send_contact_notification.side_effect = EmailDeliveryError("smtp down")
    channel = NotificationChannel(email_service)
    tasks = BackgroundTasks()

    channel.notify_contact(tasks, "Jane", "jane@example.com", None, "Hello")
    await tasks()

    assert "Failed to send contact notification" in caplog.text


@pytest.mark.unit
def test_unexpected_error_is_swallowed(email_service):
    email_service.send_booking_notification.side_effect = RuntimeError("template broke")
    channel = NotificationChannel(email_service)

    # Runs the task body directly; must not raise
    channel._run(
        "booking notification",
        lambda service: service.send_booking_notification(1, "Jane", "j@example.com", "x"),
    )

    email_service.send_booking_notification.assert_called_once()


@pytest.mark.unit
def test_task_logs_carry_correlation_id(email_service, caplog):
    caplog.set_level(logging.INFO, logger="tradesmen.services.notification_service")
    channel = NotificationChannel(email_service)

    channel._run("contact notification", lambda service: None, "req-42")

    record = next(r for r in caplog.records if r.getMessage() == "Sent contact notification")
    assert record.correlation_id == "req-42"
    assert correlation_id_var.get() is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_submit_captures_request_correlation_id(email_service, caplog):
    caplog.set_level(logging.INFO, logger="tradesmen.services.notification_service")
    email_service.send_contact_notification.side_effect = EmailDeliveryError("smtp down")
    channel = NotificationChannel(email_service)
    tasks = BackgroundTasks()

    token = correlation_id_var.set("req-7")
    try:
        channel.notify_contact(tasks, "Jane", "jane@example.com", None, "Hello")
    finally:
        correlation_id_var.reset(token)
    await tasks()

    failed = next(r for r in caplog.records if r.levelno == logging.ERROR)
    assert failed.correlation_id == "req-7"

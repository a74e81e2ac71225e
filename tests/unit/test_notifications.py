"""Unit tests for JSON Lines user notifications."""

import pytest

from latex_converter.contexts.submission.notifications import (
    DEFAULT_ERROR_OCCURRED,
    EXECUTABLE_NOT_CONFIGURED,
    MESSAGES,
    NOTIFICATION_TYPE_ERROR,
    JsonlNotifier,
)


@pytest.mark.unit
def test_notify_appends_and_recent_filters_by_user(tmp_path):
    notifier = JsonlNotifier(tmp_path / "logs" / "notifications.log")

    notifier.notify(1, NOTIFICATION_TYPE_ERROR, DEFAULT_ERROR_OCCURRED)
    notifier.notify(2, NOTIFICATION_TYPE_ERROR, EXECUTABLE_NOT_CONFIGURED)
    notifier.notify(1, NOTIFICATION_TYPE_ERROR, EXECUTABLE_NOT_CONFIGURED)

    assert len(notifier.recent()) == 3
    mine = notifier.recent(user_id=1)
    assert [item["message_key"] for item in mine] == [DEFAULT_ERROR_OCCURRED, EXECUTABLE_NOT_CONFIGURED]
    assert mine[0]["contents"] == MESSAGES[DEFAULT_ERROR_OCCURRED]
    assert notifier.recent(1)[0]["user_id"] == 1


@pytest.mark.unit
def test_recent_without_file_is_empty(tmp_path):
    assert JsonlNotifier(tmp_path / "none.log").recent() == []


@pytest.mark.unit
def test_recent_skips_malformed_lines(tmp_path):
    path = tmp_path / "notifications.log"
    notifier = JsonlNotifier(path)
    notifier.notify(1, NOTIFICATION_TYPE_ERROR, "custom.key")
    with open(path, "a", encoding="utf-8") as f:
        f.write("not json\n")

    (item,) = notifier.recent()
    assert item["contents"] == "custom.key"

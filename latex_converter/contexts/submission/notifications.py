"""
User notifications (JSON Lines).

Notifications are appended to a JSON Lines file, one object per line, so they
can be tailed and filtered by user. Message keys match the host's locale keys;
MESSAGES holds the English text written alongside each key.

Usage:
    from latex_converter.contexts.submission.notifications import (
        DEFAULT_ERROR_OCCURRED, NOTIFICATION_TYPE_ERROR, JsonlNotifier
    )

    notifier = JsonlNotifier()
    notifier.notify(user_id=3, level=NOTIFICATION_TYPE_ERROR, message_key=DEFAULT_ERROR_OCCURRED)
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from latex_converter.utils.timestamp import now_exact

load_dotenv()
NOTIFICATIONS_FILE = Path(os.getenv("NOTIFICATIONS_FILE", "outs/logs/notifications.log"))

NOTIFICATION_TYPE_SUCCESS = 0x0000001
NOTIFICATION_TYPE_ERROR = 0x0000003

EXECUTABLE_NOT_CONFIGURED = "plugins.generic.latexConverter.executable.notConfigured"
DEFAULT_ERROR_OCCURRED = "plugins.generic.latexConverter.notification.defaultErrorOccurred"

MESSAGES = {
    EXECUTABLE_NOT_CONFIGURED: "The path to the LaTeX executable is not configured.",
    DEFAULT_ERROR_OCCURRED: "An error occurred. Please contact the administrator.",
}


class JsonlNotifier:
    def __init__(self, notifications_file: Path = NOTIFICATIONS_FILE):
        self.notifications_file = Path(notifications_file)

    def notify(self, user_id: int, level: int, message_key: str) -> None:
        """Append a notification for a user."""
        self.notifications_file.parent.mkdir(parents=True, exist_ok=True)

        notification = {
            "timestamp": now_exact(),
            "user_id": user_id,
            "level": level,
            "message_key": message_key,
            "contents": MESSAGES.get(message_key, message_key),
        }

        with open(self.notifications_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(notification) + "\n")

    def recent(self, n: int = 10, user_id: Optional[int] = None) -> List[Dict]:
        """
        Get the last n notifications, optionally for one user.

        Returns:
            List of notification dicts (most recent last)
        """
        if not self.notifications_file.exists():
            return []

        notifications = []
        with open(self.notifications_file, "r", encoding="utf-8") as f:
            for line in f:
                try:
                    notifications.append(json.loads(line.strip()))
                except json.JSONDecodeError:
                    # Skip malformed lines
                    continue

        if user_id is not None:
            notifications = [item for item in notifications if item.get("user_id") == user_id]

        return notifications[-n:] if n > 0 else []

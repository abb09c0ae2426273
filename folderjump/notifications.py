"""User-visible, non-fatal notifications (toasts)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

NotificationStyle = Literal["success", "failure", "info"]


@dataclass(frozen=True)
class Notification:
    style: NotificationStyle
    title: str
    message: str = ""

    def format(self) -> str:
        prefix = {"success": "+", "failure": "!", "info": "-"}[self.style]
        if self.message:
            return f"{prefix} {self.title}: {self.message}"
        return f"{prefix} {self.title}"


Notifier = Callable[[Notification], None]


def ignore_notification(notification: Notification) -> None:
    del notification


__all__ = ["Notification", "NotificationStyle", "Notifier", "ignore_notification"]

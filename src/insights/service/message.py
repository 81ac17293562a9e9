# SPDX-License-Identifier: MIT

import logging
import time
from typing import Callable, Literal, Optional, TypedDict

from insights.signal import Signal

logger = logging.getLogger(__name__)

MessageLevel = Literal["error", "info"]


class Message(TypedDict):
    text: str
    level: MessageLevel
    posted_at_ms: float


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class MessageChannel:
    """
    Single user-facing message slot. A new message replaces the previous one
    and each message dismisses itself once `timeout_ms` has elapsed.
    """

    def __init__(
        self,
        timeout_ms: float = 5000,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._message: Optional[Message] = None
        self.history: list[Message] = []
        self.changed = Signal()

    def post(self, text: str, level: MessageLevel = "error") -> None:
        message: Message = {
            "text": text,
            "level": level,
            "posted_at_ms": self._clock(),
        }
        self._message = message
        self.history.append(message)
        self.changed.emit()

    def error(self, text: str) -> None:
        self.post(text, "error")

    def current(self) -> Optional[Message]:
        if self._message is None:
            return None
        if self._clock() - self._message["posted_at_ms"] >= self.timeout_ms:
            logger.debug("message expired: %s", self._message["text"])
            self._message = None
            self.changed.emit()
        return self._message

    def dismiss(self) -> None:
        if self._message is None:
            return
        self._message = None
        self.changed.emit()

# SPDX-License-Identifier: MIT

import logging
from typing import Callable

logger = logging.getLogger(__name__)

type Listener = Callable[[], None]


class Signal:
    """Synchronous change notification: listeners run in subscription order."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self) -> None:
        for listener in list(self._listeners):
            listener()

    def __len__(self) -> int:
        return len(self._listeners)

"""
Change notifications between writers and views.

Writers publish a topic after their write has committed; the filtered
dataset provider subscribes and recomputes. Subscriber failures are logged
and never reach the writer.
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, DefaultDict, List

logger = logging.getLogger(__name__)

FILTERS_TOPIC = "filters"
RECORDS_TOPIC = "records"

Callback = Callable[[str], None]


class ChangeNotifier:

    def __init__(self):
        self._subscribers: DefaultDict[str, List[Callback]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Callback) -> Callable[[], None]:
        """Register ``callback`` for ``topic``; returns a function that unsubscribes."""
        with self._lock:
            self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers[topic]:
                    self._subscribers[topic].remove(callback)

        return unsubscribe

    def publish(self, topic: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers[topic])

        for callback in callbacks:
            try:
                callback(topic)
            except Exception:
                logger.exception(f"Subscriber failed while handling '{topic}' change")

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers[topic])


change_notifier = ChangeNotifier()

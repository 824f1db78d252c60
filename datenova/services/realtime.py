"""
Realtime change feed.

Subscribers register for (table, event) pairs with an optional row filter and
receive every matching row the gateway commits. Delivery happens on the
publishing thread, in subscription order; nothing is queued, retried or
de-duplicated.
"""
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)

RowCallback = Callable[[Dict[str, Any]], None]


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, event: str,
                 row_filter: Optional[Dict[str, Any]], callback: RowCallback):
        self.id = str(uuid.uuid4())
        self.table = table
        self.event = event
        self.row_filter = row_filter or {}
        self.callback = callback
        self._feed = feed

    def matches(self, table: str, event: str, row: Dict[str, Any]) -> bool:
        if table != self.table:
            return False
        if self.event != "*" and event != self.event:
            return False
        return all(row.get(key) == value for key, value in self.row_filter.items())

    def unsubscribe(self) -> None:
        self._feed._remove(self)


class ChangeFeed:
    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, table: str, event: str, row_filter: Optional[Dict[str, Any]],
                  callback: RowCallback) -> Subscription:
        """
        Register a callback for rows of `table`.

        Args:
            table: Table name (e.g. "notifications")
            event: "INSERT", "UPDATE" or "*" for both
            row_filter: Column equality filter, e.g. {"user_id": "..."}
            callback: Called with the new row as a dict
        """
        subscription = Subscription(self, table, event, row_filter, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    def publish(self, table: str, event: str, row: Dict[str, Any]) -> int:
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(table, event, row)]
        for subscription in targets:
            try:
                subscription.callback(row)
            except Exception:
                # one broken listener must not stop the others
                logger.exception("change_feed_callback_failed", table=table, subscription=subscription.id)
        return len(targets)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


# Global singleton feed
change_feed = ChangeFeed()

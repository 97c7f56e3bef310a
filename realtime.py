"""Row change notifications for the dashboards.

Subscriptions are registered against a table, an event kind and an optional
equality filter. Each `poll()` re-reads the matching rows, compares them with
the snapshot taken on the previous poll and hands INSERT / UPDATE events to
the callbacks, one at a time and in the order they were found. The app calls
`poll()` on every rerun while a dashboard is open; reruns are driven by
streamlit-autorefresh.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

LOGGER = logging.getLogger("educonnect")

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENTS = (EVENT_INSERT, EVENT_UPDATE)

RowFetcher = Callable[[str, Dict[str, Any], str], List[Dict[str, Any]]]


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: str
    new: Dict[str, Any]
    old: Optional[Dict[str, Any]] = None


def _fingerprint(row: Dict[str, Any]) -> str:
    return json.dumps(row, sort_keys=True, default=str)


class Subscription:
    """Handle returned by `ChangeFeed.subscribe`. `dispose()` is idempotent."""

    def __init__(self, feed: "ChangeFeed", sub_id: int, table: str, event: str,
                 callback: Callable[[ChangeEvent], None], filters: Dict[str, Any], columns: str):
        self._feed = feed
        self.id = sub_id
        self.table = table
        self.event = event
        self.callback = callback
        self.filters = dict(filters)
        self.columns = columns
        self.active = True
        self.primed = False
        self.snapshot: Dict[str, Dict[str, Any]] = {}

    def dispose(self) -> None:
        if not self.active:
            return
        self.active = False
        self._feed._remove(self)

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, table={self.table!r}, event={self.event!r}, active={self.active})"


class ChangeFeed:
    def __init__(self, fetch_rows: RowFetcher):
        self._fetch_rows = fetch_rows
        self._subs: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        table: str,
        event: str,
        callback: Callable[[ChangeEvent], None],
        *,
        filters: Optional[Dict[str, Any]] = None,
        columns: str = "*",
    ) -> Subscription:
        event = (event or "").strip().upper()
        if event not in EVENTS:
            raise ValueError(f"Unsupported event kind: {event!r}")
        sub = Subscription(self, next(self._ids), table, event, callback, filters or {}, columns)
        self._subs[sub.id] = sub
        # Rows that already exist are the baseline, not changes.
        self._refresh(sub, deliver=False)
        LOGGER.info("Subscribed", extra={"ctx": {"component": "realtime", "table": table, "event": event, "sub": sub.id}})
        return sub

    def _remove(self, sub: Subscription) -> None:
        self._subs.pop(sub.id, None)
        LOGGER.info("Unsubscribed", extra={"ctx": {"component": "realtime", "table": sub.table, "sub": sub.id}})

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subs.values())

    def poll(self) -> int:
        """Check every active subscription once. Returns the number of events delivered."""
        delivered = 0
        for sub in list(self._subs.values()):
            if sub.active:
                delivered += self._refresh(sub, deliver=True)
        return delivered

    def close(self) -> None:
        for sub in list(self._subs.values()):
            sub.dispose()

    def _refresh(self, sub: Subscription, deliver: bool) -> int:
        try:
            rows = self._fetch_rows(sub.table, sub.filters, sub.columns)
        except Exception as e:
            LOGGER.warning(
                "Change poll failed",
                extra={"ctx": {"component": "realtime", "table": sub.table, "sub": sub.id, "error": type(e).__name__}},
            )
            return 0

        current = {str(r.get("id")): r for r in rows if r.get("id") is not None}
        previous = sub.snapshot
        sub.snapshot = current
        if not sub.primed:
            # A failed first read leaves nothing to diff against.
            sub.primed = True
            return 0
        if not deliver:
            return 0

        events: List[ChangeEvent] = []
        for row_id, row in current.items():
            old = previous.get(row_id)
            if sub.event == EVENT_INSERT and old is None:
                events.append(ChangeEvent(sub.table, EVENT_INSERT, row))
            elif sub.event == EVENT_UPDATE and old is not None and _fingerprint(old) != _fingerprint(row):
                events.append(ChangeEvent(sub.table, EVENT_UPDATE, row, old))

        delivered = 0
        for event in events:
            # A callback may dispose this or another subscription.
            if not sub.active:
                break
            sub.callback(event)
            delivered += 1
        return delivered


class SubscriptionScope:
    """Subscriptions owned by one mounted view for one user.

    `ensure(key, setup)` runs `setup()` the first time it sees `key` and
    disposes whatever the previous key had registered.
    """

    def __init__(self):
        self.key: Optional[tuple] = None
        self.handles: List[Subscription] = []

    def ensure(self, key: tuple, setup: Callable[[], List[Subscription]]) -> bool:
        if key == self.key and self.handles:
            return False
        self.dispose()
        self.handles = list(setup() or [])
        self.key = key
        return True

    def dispose(self) -> None:
        for handle in self.handles:
            handle.dispose()
        self.handles = []
        self.key = None

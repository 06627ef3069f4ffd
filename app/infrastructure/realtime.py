"""Realtime change feed — per-table channels delivered over websockets.

Publishers may run in the threadpool (sync routes) or on an event loop; each
subscriber queue is fed through its own loop with call_soon_threadsafe.
Delivery is fire-and-forget with no ordering guarantee between publishers.
"""

import asyncio
import threading
from typing import Any, Dict, List, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)

TABLES = ("service_providers", "service_categories", "reviews")

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class Channel:
    """A single subscriber's view of one table."""

    def __init__(self, feed: "ChangeFeed", table: str, queue: asyncio.Queue, loop: asyncio.AbstractEventLoop):
        self.feed = feed
        self.table = table
        self.queue = queue
        self.loop = loop

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()

    def close(self) -> None:
        self.feed.unsubscribe(self)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._channels: Dict[str, List[Channel]] = {table: [] for table in TABLES}

    def subscribe(self, table: str) -> Channel:
        """Open a channel; must be called from the subscriber's running loop."""
        if table not in self._channels:
            raise KeyError(table)
        channel = Channel(self, table, asyncio.Queue(), asyncio.get_running_loop())
        with self._lock:
            self._channels[table].append(channel)
        logger.debug("Realtime channel opened", table=table)
        return channel

    def unsubscribe(self, channel: Channel) -> None:
        with self._lock:
            channels = self._channels.get(channel.table, [])
            if channel in channels:
                channels.remove(channel)
        logger.debug("Realtime channel closed", table=channel.table)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._channels.get(table, []))

    def publish(self, table: str, event: str, record: Optional[Dict[str, Any]] = None) -> int:
        """Fan an event out to every open channel of a table. Returns the number notified."""
        payload = {"table": table, "event": event, "record": record or {}}
        with self._lock:
            targets: List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = [
                (c.loop, c.queue) for c in self._channels.get(table, [])
            ]

        delivered = 0
        for loop, queue in targets:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(queue.put_nowait, payload)
            delivered += 1
        return delivered


change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    return change_feed

"""Realtime change feed

Services publish a ``ChangeEvent`` after each committed write. Websocket
subscribers each get their own bounded queue. ``MirrorCache`` is the
id-keyed mirror a subscriber keeps, updated only through ``apply``.
"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi.encoders import jsonable_encoder

from spraydesk.config import settings
from spraydesk.core.logging import get_logger
from spraydesk.models.enums import ChangeEventType, FeedTable

logger = get_logger(__name__)


def row_payload(row: Any) -> Dict[str, Any]:
    """JSON-safe dict for a model instance or mapping; money stays a string."""
    if hasattr(row, "to_row"):
        row = row.to_row()
    return jsonable_encoder(row, custom_encoder={Decimal: str})


@dataclass(frozen=True)
class ChangeEvent:
    table: FeedTable
    event: ChangeEventType
    row: Dict[str, Any]

    @classmethod
    def of(cls, table: FeedTable, event: ChangeEventType, row: Any) -> "ChangeEvent":
        return cls(table=table, event=event, row=row_payload(row))

    @property
    def row_id(self) -> Optional[str]:
        row_id = self.row.get("id")
        return str(row_id) if row_id is not None else None

    def to_message(self) -> Dict[str, Any]:
        return {"table": self.table.value, "event": self.event.value, "row": self.row}


@dataclass(eq=False)
class Subscription:
    tables: Set[FeedTable]
    queue: asyncio.Queue = field(repr=False)
    dropped: int = 0

    def wants(self, event: ChangeEvent) -> bool:
        return event.table in self.tables

    async def next_event(self) -> ChangeEvent:
        return await self.queue.get()


class ChangeFeed:
    """In-process fan-out of change events to subscribers"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, tables: Optional[Iterable[FeedTable]] = None) -> Subscription:
        subscription = Subscription(
            tables=set(tables) if tables else set(FeedTable),
            queue=asyncio.Queue(maxsize=self.queue_size),
        )
        self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def publish(self, event: ChangeEvent) -> None:
        """Deliver to every interested subscriber without blocking the writer."""
        for subscription in self._subscribers:
            if not subscription.wants(event):
                continue
            if subscription.queue.full():
                # Slow consumer: drop its oldest event rather than stall the request
                subscription.queue.get_nowait()
                subscription.dropped += 1
                logger.warning(
                    "Change feed subscriber lagging, dropped oldest event",
                    extra={"table": event.table.value, "dropped": subscription.dropped},
                )
            subscription.queue.put_nowait(event)

    def publish_row(self, table: FeedTable, event: ChangeEventType, row: Any) -> ChangeEvent:
        change = ChangeEvent.of(table, event, row)
        self.publish(change)
        return change


class MirrorCache:
    """
    Local mirror of remote rows, keyed by table then row id.

    ``apply`` is the only mutation path once loaded: inserts and updates
    upsert the row, deletes remove it.
    """

    def __init__(self, tables: Optional[Iterable[FeedTable]] = None):
        self._rows: Dict[FeedTable, Dict[str, Dict[str, Any]]] = {
            table: {} for table in (tables or FeedTable)
        }

    def load(self, table: FeedTable, rows: Iterable[Any]) -> None:
        """Replace a table's contents with a fresh read."""
        mirrored = {}
        for row in rows:
            payload = row_payload(row)
            mirrored[str(payload["id"])] = payload
        self._rows[table] = mirrored

    def apply(self, event: ChangeEvent) -> bool:
        """Merge one change event. Returns False for tables this mirror ignores."""
        table_rows = self._rows.get(event.table)
        if table_rows is None or event.row_id is None:
            return False
        if event.event == ChangeEventType.DELETE:
            table_rows.pop(event.row_id, None)
        else:
            merged = dict(table_rows.get(event.row_id, {}))
            merged.update(event.row)
            table_rows[event.row_id] = merged
        return True

    def get(self, table: FeedTable, row_id: Any) -> Optional[Dict[str, Any]]:
        return self._rows.get(table, {}).get(str(row_id))

    def rows(self, table: FeedTable) -> List[Dict[str, Any]]:
        return list(self._rows.get(table, {}).values())

    def tracks(self, table: FeedTable) -> bool:
        return table in self._rows


# Process-wide feed; writers publish here after commit
change_feed = ChangeFeed(queue_size=settings.REALTIME_QUEUE_SIZE)

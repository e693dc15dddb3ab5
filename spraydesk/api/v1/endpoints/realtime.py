"""Realtime change feed over a websocket"""

import asyncio
import contextlib
from typing import List

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from spraydesk.api import deps
from spraydesk.core.logging import get_logger
from spraydesk.database import AsyncSessionLocal
from spraydesk.models.enums import FeedTable
from spraydesk.services.change_feed import MirrorCache, change_feed
from spraydesk.services.inventory_service import InventoryService, low_stock_items

logger = get_logger(__name__)

router = APIRouter()

DEFAULT_TABLES = "customers,inventory,invoices"
_ALERT_FIELDS = ("id", "name", "quantity", "unit", "threshold")


def parse_tables(raw: str) -> List[FeedTable]:
    """Comma separated table names; unknown names raise ValueError."""
    return [FeedTable(name.strip()) for name in raw.split(",") if name.strip()]


@router.websocket("")
async def realtime_feed(
    websocket: WebSocket,
    token: str = Query(...),
    tables: str = Query(DEFAULT_TABLES),
) -> None:
    """
    Stream ``{"table", "event", "row"}`` messages for the requested tables.

    Inventory messages also carry the current ``low_stock`` alert set,
    derived from a mirror kept fresh by the same events.
    """
    try:
        requested = parse_tables(tables)
    except ValueError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Subscribe before the snapshot read so no write can fall between the two;
    # replayed events are full rows and converge on the mirror
    subscription = change_feed.subscribe(requested)
    try:
        async with AsyncSessionLocal() as db:
            try:
                user = await deps.resolve_session(db, token)
            except HTTPException:
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return
            inventory = await InventoryService.list_items(db) if FeedTable.INVENTORY in requested else []

        await websocket.accept()
        mirror = MirrorCache([FeedTable.INVENTORY])
        mirror.load(FeedTable.INVENTORY, inventory)
        logger.info("Realtime subscriber connected", extra={"user_id": user.id, "tables": tables})

        async def pump() -> None:
            while True:
                event = await subscription.next_event()
                message = event.to_message()
                if mirror.apply(event):
                    message["low_stock"] = [
                        {key: row[key] for key in _ALERT_FIELDS}
                        for row in low_stock_items(mirror.rows(FeedTable.INVENTORY))
                    ]
                await websocket.send_json(message)

        sender = asyncio.create_task(pump())
        try:
            # Client messages are ignored; receiving only detects the disconnect
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
                await sender
            logger.info("Realtime subscriber disconnected", extra={"user_id": user.id})
    finally:
        change_feed.unsubscribe(subscription)

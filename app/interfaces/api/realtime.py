"""Realtime websocket — streams row changes for one table."""

import asyncio

import structlog
from fastapi import APIRouter, WebSocket

from app.infrastructure.realtime import Channel, get_change_feed

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["Realtime"])

UNKNOWN_TABLE_CLOSE_CODE = 4404


async def _forward(websocket: WebSocket, channel: Channel) -> None:
    while True:
        await websocket.send_json(await channel.get())


@router.websocket("/realtime/{table}")
async def realtime_channel(websocket: WebSocket, table: str):
    try:
        channel = get_change_feed().subscribe(table)
    except KeyError:
        logger.info("Realtime subscription refused", table=table)
        await websocket.accept()
        await websocket.close(code=UNKNOWN_TABLE_CLOSE_CODE)
        return

    await websocket.accept()
    forwarder = asyncio.create_task(_forward(websocket, channel))
    try:
        # Client messages are ignored; the loop only watches for disconnect
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        forwarder.cancel()
        channel.close()
        logger.debug("Realtime client disconnected", table=table)

"""
Change feed over Server-Sent Events.

A client first receives one snapshot per requested collection, then a fresh
snapshot of a collection whenever it changes. Bursts of events are
coalesced: one re-read per collection per wake-up.
"""

import asyncio
import json
from typing import AsyncIterator, Sequence

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import async_sessionmaker

from shiftbook.core.logging import get_logger
from shiftbook.db.session import AsyncSessionLocal
from shiftbook.services.change_feed import COLLECTIONS, Subscription, change_feed
from shiftbook.services.snapshot_service import load_snapshot

logger = get_logger(__name__)
router = APIRouter(tags=["Feed"])

HEARTBEAT_SECONDS = 15.0


def get_session_factory() -> async_sessionmaker:
    return AsyncSessionLocal


def format_sse(event: str, data) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def snapshot_stream(
    session_factory: async_sessionmaker,
    subscription: Subscription,
    collections: Sequence[str] = COLLECTIONS,
    heartbeat: float = HEARTBEAT_SECONDS,
) -> AsyncIterator[str]:
    try:
        async with session_factory() as db:
            for collection in collections:
                yield format_sse(collection, await load_snapshot(db, collection))

        while True:
            try:
                first = await subscription.get(timeout=heartbeat)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue

            changed = [first.collection]
            for event in subscription.drain():
                if event.collection not in changed:
                    changed.append(event.collection)

            async with session_factory() as db:
                for collection in changed:
                    if collection in collections:
                        yield format_sse(collection, await load_snapshot(db, collection))
    finally:
        subscription.close()


@router.get("/feed")
async def feed_endpoint(
    collections: list[str] = Query(list(COLLECTIONS)),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Push-based read surface for shifts, bookings and admins."""
    wanted = [c for c in collections if c in COLLECTIONS] or list(COLLECTIONS)
    subscription = change_feed.subscribe()
    logger.info("feed_stream_opened", collections=wanted)
    return StreamingResponse(
        snapshot_stream(session_factory, subscription, wanted),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )

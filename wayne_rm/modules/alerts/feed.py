"""
Realtime unread-count feed for the notification bell.

Each connected socket owns exactly one realtime channel on public.alerts,
filtered to the socket's user. A change event triggers a refetch of the
unread count, which is pushed only when it differs from the last value
sent. The channel is removed when the socket goes away.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect
from supabase import Client

from wayne_rm.database.supabase_client import create_realtime_client
from wayne_rm.core.performance import measure_async
from wayne_rm.modules.alerts.schemas import UnreadCountResponse, unread_label
from wayne_rm.modules.alerts.service import AlertService

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Any]], None]

# WebSocket close code for a rejected token
POLICY_VIOLATION = 1008


class AlertSubscription:
    """One postgres_changes channel for a single user's alerts"""

    def __init__(
        self,
        user_id: str,
        token: str,
        on_change: ChangeCallback,
        client_factory: Callable = create_realtime_client
    ):
        self.user_id = user_id
        self.token = token
        self.on_change = on_change
        self.client_factory = client_factory
        self._client = None
        self._channel = None

    async def start(self):
        if self._client is not None:
            return
        self._client = await self.client_factory()
        # RLS on alerts needs the user's JWT on the realtime socket
        await self._client.realtime.set_auth(self.token)
        # Tracked before subscribing so stop() can remove a half-open channel
        self._channel = channel = self._client.channel(f"alerts-changes-{self.user_id}")
        channel.on_postgres_changes(
            "*",
            self.on_change,
            table="alerts",
            schema="public",
            filter=f"user_id=eq.{self.user_id}",
        )
        await channel.subscribe()
        logger.debug(f"Alert channel subscribed for {self.user_id}")

    async def stop(self):
        client, channel = self._client, self._channel
        self._client = self._channel = None
        if client is None:
            return
        try:
            if channel is not None:
                # Closes the socket once the last channel is gone
                await client.remove_channel(channel)
            else:
                await client.remove_all_channels()
            logger.debug(f"Alert channel removed for {self.user_id}")
        except Exception as e:
            logger.warning(f"Could not remove alert channel for {self.user_id}: {e}")


SubscriptionFactory = Callable[[str, str, ChangeCallback], AlertSubscription]


def get_subscription_factory() -> SubscriptionFactory:
    return AlertSubscription


async def _wait_for_disconnect(websocket: WebSocket):
    # The feed is server-push only; incoming frames are ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _fetch_count(service: AlertService, user_id: str) -> int:
    return await measure_async(
        lambda: asyncio.to_thread(service.unread_count, user_id),
        "alerts.unread_count"
    )


async def _send_count(websocket: WebSocket, count: int):
    payload = UnreadCountResponse(unread_count=count, label=unread_label(count))
    await websocket.send_json(payload.model_dump())


async def run_feed(
    websocket: WebSocket,
    user_id: str,
    token: str,
    supabase: Client,
    subscription_factory: SubscriptionFactory
):
    """Serve one accepted socket until the client disconnects"""
    service = AlertService(supabase)
    changes: asyncio.Queue = asyncio.Queue()

    last_count: Optional[int] = await _fetch_count(service, user_id)
    await _send_count(websocket, last_count)

    subscription = subscription_factory(user_id, token, changes.put_nowait)
    receiver = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await subscription.start()
        while True:
            change = asyncio.create_task(changes.get())
            done, _ = await asyncio.wait({receiver, change}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                change.cancel()
                break
            try:
                count = await _fetch_count(service, user_id)
            except Exception:
                # Keep the socket open; the next change retries
                continue
            if count != last_count:
                last_count = count
                await _send_count(websocket, count)
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        await subscription.stop()
        logger.debug(f"Alert feed closed for {user_id}")

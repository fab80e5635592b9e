import asyncio
import logging
from typing import Dict, Optional

from starlette.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)


class LiveConnection:
    """A WebSocket plus the event loop that owns it.

    Requests that trigger notifications may run in a worker thread, so sends
    are handed to the socket's own loop and never awaited (at-most-once).
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop

    @property
    def is_open(self) -> bool:
        return (
            not self.loop.is_closed()
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, message: dict) -> bool:
        if not self.is_open:
            return False
        future = asyncio.run_coroutine_threadsafe(self.websocket.send_json(message), self.loop)
        future.add_done_callback(self._log_failure)
        return True

    async def close(self, code: int = 1000):
        if not self.is_open:
            return
        if asyncio.get_running_loop() is self.loop:
            await self.websocket.close(code=code)
        else:
            await asyncio.wrap_future(
                asyncio.run_coroutine_threadsafe(self.websocket.close(code=code), self.loop)
            )

    @staticmethod
    def _log_failure(future):
        if not future.cancelled() and future.exception() is not None:
            logger.warning("Live push failed: %s", future.exception())


class ConnectionRegistry:
    """Maps a user id to the single live connection that receives their pushes.

    Registering again for the same user replaces the previous connection.
    Owned by the application (created and torn down in the lifespan hook);
    the registry is process local and never persisted.
    """

    def __init__(self):
        self._connections: Dict[str, LiveConnection] = {}

    def register(self, user_id: str, connection: LiveConnection):
        self._connections[user_id] = connection
        logger.debug("Registered live connection for user %s", user_id)

    def unregister(self, user_id: str, connection: Optional[LiveConnection] = None) -> Optional[LiveConnection]:
        """Drop the mapping for ``user_id``.

        When ``connection`` is given, only that connection is removed, so a
        stale socket closing late cannot evict its replacement.
        """
        current = self._connections.get(user_id)
        if current is None or (connection is not None and current is not connection):
            return None
        logger.debug("Unregistered live connection for user %s", user_id)
        return self._connections.pop(user_id)

    def get(self, user_id: str) -> Optional[LiveConnection]:
        return self._connections.get(user_id)

    def __len__(self):
        return len(self._connections)

    async def disconnect(self, user_id: str):
        connection = self.unregister(user_id)
        if connection is not None:
            await connection.close()

    async def close_all(self):
        for user_id in list(self._connections):
            await self.disconnect(user_id)

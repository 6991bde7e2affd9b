import asyncio

from fastapi import WebSocket
from loguru import logger as log


class EventHub:
    """Fan-out of JSON events to every connected ``/ws/events`` client.

    ``publish`` may be called from any thread (pynput hooks, threadpool
    routes); it hands the send over to the server's event loop with
    ``asyncio.run_coroutine_threadsafe``.
    """

    def __init__(self) -> None:
        self._websockets: list[WebSocket] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def add(self, websocket: WebSocket) -> None:
        self._websockets.append(websocket)

    def discard(self, websocket: WebSocket) -> None:
        if websocket in self._websockets:
            self._websockets.remove(websocket)

    def publish(self, message: dict) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.send_to_all(message), self._loop)

    async def send_to_all(self, message: dict) -> None:
        for ws in list(self._websockets):
            try:
                await ws.send_json(message)
            except Exception as e:
                # client went away between receive and send
                log.debug(f"Dropping websocket: {e}")
                self.discard(ws)

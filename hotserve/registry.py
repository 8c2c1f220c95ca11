import asyncio
import logging

log = logging.getLogger(__name__)

RELOAD = "reload"
GREETING = "Hello from server"

SEND_ERRORS = (ConnectionError, RuntimeError, asyncio.TimeoutError)


class ConnectionRegistry:
    """The set of open WebSocket connections a broadcast goes to.

    Only ever touched from the event loop thread.
    """

    def __init__(self, send_timeout=5.0):
        self.send_timeout = send_timeout
        self._clients = set()

    def __len__(self):
        return len(self._clients)

    def __iter__(self):
        return iter(list(self._clients))

    def __contains__(self, ws):
        return ws in self._clients

    async def register(self, ws):
        self._clients.add(ws)
        log.info("Client connected (%d live)", len(self._clients))
        return await self._send(ws, GREETING)

    def unregister(self, ws):
        if ws in self._clients:
            self._clients.discard(ws)
            log.info("Client disconnected (%d live)", len(self._clients))

    async def broadcast(self, payload):
        """Send ``payload`` to every connection registered right now.

        A failing connection is dropped without affecting the others.
        Returns the number of connections that got the payload.
        """
        targets = list(self._clients)
        if not targets:
            return 0
        results = await asyncio.gather(*(self._send(ws, payload) for ws in targets))
        return sum(results)

    async def _send(self, ws, payload):
        if ws.closed:
            self.unregister(ws)
            return False
        if isinstance(payload, bytes):
            send = ws.send_bytes(payload)
        else:
            send = ws.send_str(payload)
        try:
            await asyncio.wait_for(send, self.send_timeout)
        except SEND_ERRORS as e:
            log.debug("Dropping client after failed send: %r", e)
            self.unregister(ws)
            await self._close(ws)
            return False
        return True

    async def _close(self, ws):
        try:
            await asyncio.wait_for(ws.close(), self.send_timeout)
        except SEND_ERRORS as e:
            log.debug("Closing dropped client failed: %r", e)

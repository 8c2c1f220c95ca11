import asyncio
import logging
import os

from aiohttp import web, WSMsgType

from .content_types import content_type_for
from .inject import inject_reload_script
from .state import HEARTBEAT_KEY, PORT_KEY, REGISTRY_KEY, ROOT_KEY

log = logging.getLogger(__name__)

INDEX = "index.html"
HTML_SUFFIXES = (".html", ".htm")


def resolve_path(root, url_path):
    """Map a request path onto a file under ``root``.

    ``root`` must already be canonical. Returns None for anything that
    would land outside it.
    """
    if "\x00" in url_path:
        return None
    url_path = url_path.lstrip("/")
    if not url_path:
        url_path = INDEX
    try:
        candidate = os.path.realpath(os.path.join(root, url_path))
        if os.path.commonpath([root, candidate]) != root:
            return None
    except ValueError:
        # different drive on Windows
        return None
    if os.path.isdir(candidate):
        candidate = os.path.join(candidate, INDEX)
    return candidate


def read_text(path):
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def read_bytes(path):
    with open(path, "rb") as f:
        return f.read()


def not_found():
    return web.Response(status=404, text="Not Found")


# -------- WebSocket --------
async def websocket_handler(request, ws):
    registry = request.app[REGISTRY_KEY]
    await ws.prepare(request)

    try:
        await registry.register(ws)
        async for msg in ws:
            if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                await registry.broadcast(msg.data)
            elif msg.type == WSMsgType.ERROR:
                log.warning("WebSocket connection closed with %r", ws.exception())
                break
    finally:
        registry.unregister(ws)
    return ws


# -------- HTTP --------
async def file_handler(request):
    root = request.app[ROOT_KEY]
    file_path = resolve_path(root, request.match_info.get("path", ""))

    if file_path is None or not os.path.isfile(file_path):
        return not_found()

    loop = asyncio.get_running_loop()
    try:
        if file_path.endswith(HTML_SUFFIXES):
            html = await loop.run_in_executor(None, read_text, file_path)
            html = inject_reload_script(html, request.app[PORT_KEY])
            body = html.encode("utf-8", errors="surrogateescape")
            return web.Response(body=body, content_type="text/html")

        data = await loop.run_in_executor(None, read_bytes, file_path)
    except FileNotFoundError:
        return not_found()
    except OSError:
        log.exception("Failed to serve %s", file_path)
        return web.Response(status=500, text="Internal Server Error")

    return web.Response(body=data, content_type=content_type_for(file_path))


async def handle(request):
    """Upgrade to a WebSocket when asked to, otherwise serve a file."""
    ws = web.WebSocketResponse(heartbeat=request.app[HEARTBEAT_KEY])
    if ws.can_prepare(request).ok:
        return await websocket_handler(request, ws)
    return await file_handler(request)

import os

from aiohttp import web

from .handlers import handle
from .registry import ConnectionRegistry
from .state import DEBOUNCE_KEY, HEARTBEAT_KEY, PORT_KEY, REGISTRY_KEY, ROOT_KEY
from .watcher import watch_files

DEFAULT_DEBOUNCE = 0.1
DEFAULT_HEARTBEAT = 30.0


def make_app(root, port, *, registry=None, debounce=DEFAULT_DEBOUNCE,
             heartbeat=DEFAULT_HEARTBEAT, watch=True):
    """Build the application serving ``root``.

    ``port`` is the port browsers reach the server on; it is baked into the
    reload client injected into every HTML page.
    """
    app = web.Application()
    app[ROOT_KEY] = os.path.realpath(root)
    app[PORT_KEY] = port
    app[REGISTRY_KEY] = registry if registry is not None else ConnectionRegistry()
    app[HEARTBEAT_KEY] = heartbeat
    app[DEBOUNCE_KEY] = debounce

    app.router.add_get("/{path:.*}", handle)

    if watch:
        app.cleanup_ctx.append(watch_files)
    return app

from aiohttp import web

from .registry import ConnectionRegistry

ROOT_KEY = web.AppKey("root", str)
PORT_KEY = web.AppKey("port", int)
REGISTRY_KEY = web.AppKey("registry", ConnectionRegistry)
HEARTBEAT_KEY = web.AppKey("heartbeat", float)
DEBOUNCE_KEY = web.AppKey("debounce", float)

"""Local development file server with live reload."""

from .app import make_app
from .registry import GREETING, RELOAD, ConnectionRegistry

__all__ = ["make_app", "ConnectionRegistry", "RELOAD", "GREETING"]
__version__ = "0.1.0"

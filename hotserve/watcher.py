import asyncio
import logging
import os

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .registry import RELOAD
from .state import DEBOUNCE_KEY, REGISTRY_KEY, ROOT_KEY

log = logging.getLogger(__name__)

IGNORED_DIRS = {"node_modules", "bower_components", "__pycache__", "venv"}

# Serving a file opens and closes it; those must not trigger a reload.
IGNORED_EVENT_TYPES = {"opened", "closed", "closed_no_write"}


class ReloadScheduler:
    """Turns bursts of change notifications into reload broadcasts.

    Lives on the event loop. The first change opens a window of
    ``debounce`` seconds; everything arriving inside it is folded into a
    single broadcast. A window of 0 broadcasts on every change.
    """

    def __init__(self, registry, debounce=0.1):
        self.registry = registry
        self.debounce = debounce
        self._pending = None
        self._tasks = set()

    def schedule(self, path=None):
        if path is not None:
            log.debug("Change detected: %s", path)
        if self.debounce <= 0:
            self._fire()
            return
        if self._pending is None:
            loop = asyncio.get_running_loop()
            self._pending = loop.call_later(self.debounce, self._fire)

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self):
        self._pending = None
        task = asyncio.ensure_future(self._reload())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reload(self):
        delivered = await self.registry.broadcast(RELOAD)
        log.info("Reload sent to %d client(s)", delivered)


# -------- File watcher --------
class ReloadEventHandler(FileSystemEventHandler):
    """Runs on the observer thread and hands changes to the event loop."""

    def __init__(self, root, loop, notify):
        super().__init__()
        self.root = root
        self.loop = loop
        self.notify = notify

    def is_ignored(self, path):
        rel = os.path.relpath(os.fsdecode(path), self.root)
        for part in rel.split(os.sep):
            if part in (os.curdir, os.pardir):
                continue
            if part.startswith(".") or part in IGNORED_DIRS:
                return True
        return False

    def on_any_event(self, event):
        if event.event_type in IGNORED_EVENT_TYPES:
            return
        # a directory "modified" always comes with an event for its child
        if event.is_directory and event.event_type == "modified":
            return

        paths = [p for p in (event.src_path, getattr(event, "dest_path", "")) if p]
        relevant = [p for p in paths if not self.is_ignored(p)]
        if not relevant:
            log.debug("Ignoring %s on %s", event.event_type, event.src_path)
            return

        try:
            self.loop.call_soon_threadsafe(self.notify, os.fsdecode(relevant[0]))
        except RuntimeError:
            log.debug("Event loop closed, dropping change to %s", relevant[0])


async def watch_files(app):
    """Cleanup context running a recursive watchdog observer on the root."""
    root = app[ROOT_KEY]
    loop = asyncio.get_running_loop()
    scheduler = ReloadScheduler(app[REGISTRY_KEY], app[DEBOUNCE_KEY])
    handler = ReloadEventHandler(root, loop, scheduler.schedule)

    observer = Observer()
    try:
        observer.schedule(handler, root, recursive=True)
        observer.start()
    except OSError as e:
        log.error("Cannot watch %s, live reload disabled: %s", root, e)
        yield
        return

    log.info("Watching %s for changes", root)
    try:
        yield
    finally:
        scheduler.cancel()
        observer.stop()
        await loop.run_in_executor(None, observer.join)

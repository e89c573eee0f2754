"""
Watch mode.

The WatchCoordinator keeps a bundle up to date: any change to one of the
bundled files closes every watch, waits for the editor to finish writing,
rebuilds from the entry file and then re-arms the watches on the (possibly
different) new set of files.

    idle --change--> rebuilding --settle delay--> rebuild
         <--re-arm delay-------------------------'
"""
import os
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from cjs.log import debug_log


IDLE = "idle"
REBUILDING = "rebuilding"

SETTLE_DELAY = 1.0  # Absorbs multi-step editor writes
REARM_DELAY = 2.0  # Avoids re-arming while the file system settles

CHANGE_EVENTS = frozenset(("created", "modified", "moved", "deleted", "closed"))


def schedule(delay, callback):
    """Run `callback` after `delay` seconds on a timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ChangeHandler(FileSystemEventHandler):
    """Forwards change events for a fixed set of files."""

    def __init__(self, paths, callback):
        super().__init__()
        self.paths = paths
        self.callback = callback

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in CHANGE_EVENTS:
            return
        for path in (event.src_path, getattr(event, "dest_path", None)):
            if path and os.path.abspath(os.fsdecode(path)) in self.paths:
                self.callback(os.fsdecode(path))
                return


class FileWatch:
    """A watchdog observer on the directories of a set of files."""

    def __init__(self, paths, callback, observer_factory=Observer):
        self.paths = frozenset(os.path.abspath(p) for p in paths)
        self._observer = observer_factory()
        handler = ChangeHandler(self.paths, callback)
        for directory in sorted({os.path.dirname(p) for p in self.paths}):
            self._observer.schedule(handler, directory, recursive=False)
        self._observer.start()

    def close(self):
        self._observer.stop()
        # Events are delivered on the observer thread, which cannot join itself
        if threading.current_thread() is not self._observer:
            self._observer.join()


class WatchCoordinator:
    """
    Rebuild-on-change state machine.

    Args:
        build: Callable that rebuilds and persists the bundle. It reports its
            own success; any exception it raises is passed to on_error.
        paths: Callable returning the files of the current module graph.
        on_error: Called with the exception when a rebuild fails.
        settle_delay: Seconds between the change and the rebuild.
        rearm_delay: Seconds between the rebuild and re-arming the watches.
        watch_factory: Builds a watch from (paths, callback); needs close().
        scheduler: Runs a callback after a delay; returns an object with
            cancel().
    """

    def __init__(self, build, paths, on_error, settle_delay=SETTLE_DELAY,
                 rearm_delay=REARM_DELAY, watch_factory=FileWatch, scheduler=schedule):
        self._build = build
        self._paths = paths
        self._on_error = on_error
        self.settle_delay = settle_delay
        self.rearm_delay = rearm_delay
        self._watch_factory = watch_factory
        self._schedule = scheduler
        self._lock = threading.Lock()
        self._watch = None
        self._pending = None
        self._stopped = False
        self.state = IDLE
        self.watched = frozenset()
        self.rebuilds = 0

    def start(self):
        """Start watching the files of the last successful build."""
        with self._lock:
            self._stopped = False
            self._arm(self._paths())

    def stop(self):
        """Close all watches and cancel any pending rebuild."""
        with self._lock:
            self._stopped = True
            watch, self._watch = self._watch, None
            pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()
        if watch is not None:
            watch.close()

    def _arm(self, paths):
        self.watched = frozenset(paths)
        self._watch = self._watch_factory(sorted(self.watched), self.on_change)
        self.state = IDLE
        debug_log(f"Watching {len(self.watched)} file(s)")

    def on_change(self, path):
        """Handle a change event; only the first event while idle counts."""
        with self._lock:
            if self._stopped or self.state != IDLE:
                return
            self.state = REBUILDING
            watch, self._watch = self._watch, None
        debug_log(f"Change detected in {path}")
        if watch is not None:
            watch.close()
        with self._lock:
            if not self._stopped:
                self._pending = self._schedule(self.settle_delay, self._rebuild)

    def _rebuild(self):
        with self._lock:
            if self._stopped:
                return
        self.rebuilds += 1
        failed = False
        try:
            self._build()
        except Exception as e:
            failed = True
            self._on_error(e)
        finally:
            # A failed build may have loaded only part of the graph; keep
            # watching the files of the last good build as well.
            paths = set(self._paths())
            if failed:
                paths |= self.watched
            with self._lock:
                if not self._stopped:
                    self._pending = self._schedule(self.rearm_delay, lambda: self._rearm(paths))

    def _rearm(self, paths):
        with self._lock:
            if self._stopped:
                return
            self._pending = None
            self._arm(paths)

"""File-change subscriptions that back the live-reload channel.

Each subscription owns one watchdog observer.  The observer thread only puts
events on a queue; a single consumer drains the queue and forwards a
notification per event.  Putting the close sentinel on the queue is what
ends a subscription.
"""

import logging
import os
import queue
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15.0
# opened/closed-without-write events fire on every read, including ours
CHANGE_EVENT_TYPES = {
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
}

_CLOSED = object()


def _same_file(event_path, target):
    if isinstance(event_path, bytes):
        event_path = os.fsdecode(event_path)
    return os.path.normpath(os.path.abspath(event_path)) == str(target)


class ChangeForwarder(FileSystemEventHandler):
    def __init__(self, path, channel):
        self.path = path
        self.channel = channel

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in CHANGE_EVENT_TYPES:
            return
        paths = [event.src_path]
        if event.event_type == EVENT_TYPE_MOVED:
            # editors that save by renaming a temp file over the original
            paths.append(event.dest_path)
        if any(_same_file(p, self.path) for p in paths):
            self.channel.put(event)


class WatchSubscription:
    """Watch one file and queue every change event for a single consumer."""

    def __init__(self, path):
        # missing files and NUL bytes fail here, before the observer starts
        self.path = Path(path).resolve(strict=True)
        self.channel = queue.Queue()
        self._closed = False
        self.observer = Observer()
        self.observer.schedule(
            ChangeForwarder(self.path, self.channel),
            str(self.path.parent),
            recursive=False,
        )
        self.observer.start()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def closed(self):
        return self._closed

    def events(self, timeout=None):
        """Yield queued events in order until the subscription is closed.

        With a ``timeout``, ``None`` is yielded whenever that many seconds
        pass without an event.
        """
        while True:
            try:
                event = self.channel.get(timeout=timeout)
            except queue.Empty:
                yield None
                continue
            if event is _CLOSED:
                return
            yield event

    def close(self):
        if self._closed:
            return
        self._closed = True
        self.channel.put(_CLOSED)
        self.observer.stop()
        self.observer.join()


def stream_notifications(
    subscription, notify, keepalive=None, interval=KEEPALIVE_SECONDS
):
    """Call ``notify()`` once per change event until the client goes away.

    ``keepalive()`` (if given) is called after ``interval`` idle seconds so a
    dropped connection is noticed even when the file never changes.  An
    ``OSError`` from either callback ends the stream; the subscription is
    always closed on the way out.
    """
    timeout = interval if keepalive is not None else None
    try:
        for event in subscription.events(timeout=timeout):
            if event is None:
                keepalive()
                continue
            logger.info("Received file change event for %s", subscription.path)
            notify()
    except OSError as exc:
        logger.info(
            "Stopped watching %s, client went away: %s", subscription.path, exc
        )
    finally:
        subscription.close()

import types

from watchdog.events import FileModifiedEvent, FileMovedEvent

from mdpreview import watch


class FakeObserver:
    def __init__(self):
        self.scheduled = []
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler, path=".", recursive=False):
        self.scheduled.append((handler, path, recursive))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self):
        self.joined = True


def _subscription(monkeypatch, tmp_path):
    monkeypatch.setattr(watch, "Observer", FakeObserver)
    doc = tmp_path / "doc.md"
    doc.write_text("hi")
    return watch.WatchSubscription(doc), doc


def test_subscription_watches_parent_directory(monkeypatch, tmp_path):
    subscription, doc = _subscription(monkeypatch, tmp_path)
    [(handler, path, recursive)] = subscription.observer.scheduled
    assert path == str(doc.resolve().parent)
    assert recursive is False
    assert subscription.observer.started


def test_forwarder_only_queues_changes_to_the_watched_file(
    monkeypatch, tmp_path
):
    subscription, doc = _subscription(monkeypatch, tmp_path)
    handler = subscription.observer.scheduled[0][0]
    handler.on_any_event(FileModifiedEvent(str(tmp_path / "other.md")))
    handler.on_any_event(
        types.SimpleNamespace(
            event_type="opened", is_directory=False, src_path=str(doc)
        )
    )
    handler.on_any_event(FileModifiedEvent(str(doc)))
    handler.on_any_event(FileMovedEvent(str(tmp_path / ".doc.md.swp"), str(doc)))
    assert subscription.channel.qsize() == 2


def test_stream_sends_one_notification_per_event(monkeypatch, tmp_path):
    subscription, doc = _subscription(monkeypatch, tmp_path)
    subscription.channel.put(FileModifiedEvent(str(doc)))
    subscription.channel.put(FileModifiedEvent(str(doc)))
    subscription.close()
    sent = []
    watch.stream_notifications(subscription, lambda: sent.append(b""))
    assert sent == [b"", b""]
    assert subscription.closed


def test_failed_send_ends_the_stream_cleanly(monkeypatch, tmp_path):
    subscription, doc = _subscription(monkeypatch, tmp_path)
    subscription.channel.put(FileModifiedEvent(str(doc)))
    subscription.channel.put(FileModifiedEvent(str(doc)))
    calls = []

    def notify():
        calls.append(1)
        raise BrokenPipeError("client went away")

    watch.stream_notifications(subscription, notify)
    assert calls == [1]
    assert subscription.closed
    assert subscription.observer.stopped
    assert subscription.observer.joined


def test_idle_keepalive_detects_dropped_client(monkeypatch, tmp_path):
    subscription, _ = _subscription(monkeypatch, tmp_path)
    pings = []

    def keepalive():
        pings.append(1)
        raise ConnectionResetError("gone")

    watch.stream_notifications(
        subscription, lambda: None, keepalive=keepalive, interval=0.01
    )
    assert pings == [1]
    assert subscription.closed


def test_close_is_idempotent(monkeypatch, tmp_path):
    subscription, _ = _subscription(monkeypatch, tmp_path)
    with subscription:
        pass
    subscription.close()
    assert list(subscription.events()) == []

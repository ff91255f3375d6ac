"""HTTP front end: ``/?path=`` renders a document, ``/watch?path=`` streams
change notifications for it as server-sent events."""

import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

from .command_registry import register_command
from .paths import resolve_reference
from .render import RenderError, render_doc
from .watch import WatchSubscription, stream_notifications

logger = logging.getLogger(__name__)

DEFAULT_HOST = os.environ.get("MDPREVIEW_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.environ.get("MDPREVIEW_PORT", "3000"))


def requested_path(query, cwd):
    """Return the document path named by ``query`` or None if there is none.

    Relative paths are taken relative to ``cwd``, matching the links written
    by the renderer.
    """
    values = parse_qs(query).get("path")
    if not values or not values[0]:
        return None
    return Path(resolve_reference(values[0], cwd, base_is_file=False))


class PreviewRequestHandler(BaseHTTPRequestHandler):
    server_version = "mdpreview"

    def do_GET(self):
        parts = urlsplit(self.path)
        if parts.path == "/":
            self.handle_render(parts.query)
        elif parts.path == "/watch":
            self.handle_watch(parts.query)
        else:
            self.send_text(404, "Not found\n")

    def send_text(self, status, text):
        self.send_body(status, "text/plain; charset=utf-8", text.encode("utf-8"))

    def send_body(self, status, content_type, body):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def handle_render(self, query):
        cwd = os.getcwd()
        path = requested_path(query, cwd)
        if path is None:
            self.send_text(400, "Missing 'path' query parameter\n")
            return
        try:
            page = render_doc(path, use_live_reload=True, cwd=cwd)
        except RenderError as exc:
            logger.warning("%s", exc)
            self.send_text(404, f"{exc}\n")
            return
        self.send_body(200, "text/html; charset=utf-8", page.encode("utf-8"))

    def handle_watch(self, query):
        path = requested_path(query, os.getcwd())
        if path is None:
            self.send_text(400, "Missing 'path' query parameter\n")
            return
        try:
            subscription = WatchSubscription(path)
        except (OSError, ValueError) as exc:
            logger.warning("Unable to watch %s: %s", path, exc)
            self.send_text(404, f"Unable to watch {path}: {exc}\n")
            return
        self.close_connection = True
        try:
            self.send_response(200)
            self.send_header("Content-Type", "text/event-stream")
            self.send_header("Cache-Control", "no-cache")
            self.end_headers()
            self.wfile.flush()
        except OSError:
            subscription.close()
            return

        def notify():
            self.wfile.write(b"data: \n\n")
            self.wfile.flush()

        def keepalive():
            self.wfile.write(b": keepalive\n\n")
            self.wfile.flush()

        stream_notifications(subscription, notify, keepalive)

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def make_server(host=DEFAULT_HOST, port=DEFAULT_PORT):
    return ThreadingHTTPServer((host, port), PreviewRequestHandler)


def _serve_forever(httpd):
    """Run the HTTP server until shutdown is called."""
    httpd.serve_forever()


@register_command(
    "Serve live-reloading previews of markdown files",
    help={
        "host": "Interface to listen on",
        "port": "Port to listen on",
    },
)
def serve(host=DEFAULT_HOST, port=DEFAULT_PORT):
    try:
        httpd = make_server(host, port)
    except OSError as exc:
        raise SystemExit(f"Could not start server on port {port}: {exc}")
    print(f"Serving previews at http://localhost:{port}/?path=<file>")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()

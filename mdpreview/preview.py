"""Open a markdown file in a browser window backed by the preview server."""

import os
import threading
import time
from pathlib import Path

from .browser_lifecycle import (
    browser_window_is_alive,
    close_browser_window,
    start_browser,
)
from .command_registry import register_command
from .links import navigation_url
from .paths import relativize_under_cwd
from .server import DEFAULT_PORT, _serve_forever, make_server

# only this machine needs to reach a single-window preview
PREVIEW_HOST = "127.0.0.1"


def preview_url(filename, port, cwd):
    target = relativize_under_cwd(Path(filename).resolve(), cwd)
    return f"http://localhost:{port}" + navigation_url(target)


@register_command(
    "Serve a markdown file and open it in a live-reloading browser window",
    help={
        "filename": "Markdown file to preview",
        "host": "Interface the preview server listens on",
        "port": "Port for the preview server",
    },
)
def preview(filename, host=PREVIEW_HOST, port=DEFAULT_PORT):
    if not Path(filename).is_file():
        raise FileNotFoundError(f"Markdown file not found: {filename}")
    try:
        httpd = make_server(host, port)
    except OSError as exc:
        raise SystemExit(f"Could not start server on port {port}: {exc}")
    threading.Thread(target=_serve_forever, args=(httpd,), daemon=True).start()
    url = preview_url(filename, port, os.getcwd())
    print("Previewing:", url)
    browser = start_browser(url)
    try:
        while True:
            # exit once the window is closed so the process does not linger
            if not browser_window_is_alive(browser):
                break
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        httpd.shutdown()
        httpd.server_close()
        close_browser_window(browser)

"""Selenium window management for ``mdprev preview``.

The preview command keeps its server alive exactly as long as the window it
opened, so these helpers answer "is the preview window still there?" and
tear it down without caring whether the user already closed it.
"""


def start_browser(url):
    """Open ``url`` in a new Chrome window, or Firefox if Chrome won't start."""
    try:
        from selenium import webdriver
    except ImportError as exc:
        raise ImportError(
            "'mdprev preview' needs selenium; install mdPreview[browser]."
        ) from exc
    try:
        window = webdriver.Chrome()
    except Exception:
        window = webdriver.Firefox()
    window.get(url)
    return window


def browser_window_is_alive(window):
    # a closed window shows up as no handles, or as a driver error on the
    # next round trip; either way the preview is over
    if window is None:
        return False
    try:
        if not window.window_handles:
            return False
        window.execute_script("return 1")
    except Exception:
        return False
    return True


def close_browser_window(window):
    # the user may have closed the preview already; quitting then raises
    if window is None:
        return
    try:
        window.quit()
    except Exception:
        pass

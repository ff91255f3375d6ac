import os
import subprocess
import sys
from pathlib import Path


def _cli_env():
    repo_root = Path(__file__).resolve().parents[2]
    env = os.environ.copy()
    env["PYTHONPATH"] = str(repo_root)
    return env


def _run(args, cwd):
    cmd = [sys.executable, "-m", "mdpreview.command_line"] + args
    return subprocess.run(
        cmd, capture_output=True, text=True, env=_cli_env(), cwd=cwd
    )


def test_render_cli(tmp_path):
    (tmp_path / "img").mkdir()
    (tmp_path / "img" / "pic.gif").write_bytes(b"GIF89a")
    doc = tmp_path / "doc.md"
    doc.write_text("# Doc\n\n![pic](img/pic.gif)\n\n[other](other.md)\n")
    proc = _run(["render", "doc.md"], tmp_path)
    assert proc.returncode == 0, proc.stderr
    page = doc.with_suffix(".html").read_text(encoding="utf-8")
    assert "data:image/gif;base64,R0lGODlh" in page
    assert 'href="/?path=other.md"' in page
    assert "EventSource" not in page


def test_render_cli_output_and_live_reload(tmp_path):
    (tmp_path / "doc.md").write_text("hello\n")
    (tmp_path / "out").mkdir()
    proc = _run(
        ["render", "doc.md", "--output", "out/page.html", "--live-reload"],
        tmp_path,
    )
    assert proc.returncode == 0, proc.stderr
    assert "EventSource" in (tmp_path / "out" / "page.html").read_text()


def test_render_cli_missing_file(tmp_path):
    proc = _run(["render", "missing.md"], tmp_path)
    assert proc.returncode == 1
    assert "Unable to read document" in proc.stderr


def test_help_lists_commands(tmp_path):
    proc = _run(["--help"], tmp_path)
    assert proc.returncode == 0
    for name in ["preview", "render", "serve"]:
        assert name in proc.stdout

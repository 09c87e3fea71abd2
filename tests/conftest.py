import logging
import sys
import textwrap
import time
from pathlib import Path

import pytest

from train_invoke.log_setup import LOGGER_NAME
from train_invoke.settings import DEFAULT_ENTRY_TEMPLATE, LauncherSettings

REPORT_SCRIPT = """
import json, os, sys
print(json.dumps({
    "argv": sys.argv[1:],
    "cwd": os.getcwd(),
    "pythonpath": os.environ.get("PYTHONPATH"),
    "pid": os.getpid(),
    "sid": os.getsid(0),
}), flush=True)
print("done", flush=True)
"""

SLOW_SCRIPT = """
import time
for i in range(20):
    print(f"step {i}", flush=True)
    time.sleep(0.05)
print("done", flush=True)
"""


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def repo(tmp_path):
    """A fake repository root with a training script factory."""
    root = tmp_path / "repo"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def make_script(repo):
    def _make(name: str, body: str = REPORT_SCRIPT) -> Path:
        path = repo / DEFAULT_ENTRY_TEMPLATE.format(script=name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(body))
        return path

    return _make


@pytest.fixture
def slow_body():
    return SLOW_SCRIPT


@pytest.fixture
def settings(repo):
    return LauncherSettings(root=str(repo), python=sys.executable, pull=False, poll_interval=0.01)


@pytest.fixture
def write_yaml(tmp_path):
    def _write(content: str, name: str = "run.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content))
        return path

    return _write


@pytest.fixture
def wait_for_text():
    def _wait(path: Path, needle: str, timeout: float = 15.0) -> str:
        """Poll a log file until ``needle`` shows up."""
        deadline = time.time() + timeout
        while time.time() < deadline:
            text = path.read_text() if path.exists() else ""
            if needle in text:
                return text
            time.sleep(0.05)
        raise AssertionError(f"{needle!r} never appeared in {path}")

    return _wait

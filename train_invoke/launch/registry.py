from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def pid_file(log_dir: Union[str, Path], script_name: str) -> Path:
    return Path(log_dir) / f"{script_name}.pid"


def write_pid(log_dir: Union[str, Path], script_name: str, pid: int) -> Path:
    """Record the latest pid for a script, replacing whatever was there.

    Advisory only: nothing here checks that the pid is still alive.
    """
    path = pid_file(log_dir, script_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{pid}\n")
    logger.debug("Wrote pid %d to %s", pid, path)
    return path

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from train_invoke.errors import ScriptNotFound, SpawnFailure
from train_invoke.launch.registry import write_pid
from train_invoke.settings import LauncherSettings

logger = logging.getLogger(__name__)

LATEST_LINK = "latest.log"


@dataclass
class LaunchRecord:
    pid: int
    log_file: Path
    pid_file: Path
    command: List[str]
    process: subprocess.Popen


def resolve_entry_point(settings: LauncherSettings, script_name: str) -> Path:
    entry_point = settings.root_path / settings.entry_template.format(script=script_name)
    if not entry_point.is_file():
        raise ScriptNotFound(f"Python script not found: {entry_point}")
    return entry_point


def log_file_name(script_name: str, config_path: Union[str, Path], ts: Optional[str] = None) -> str:
    """main_<script>_<YYYYmmdd_HHMMSS>_<config stem>.log"""
    ts = ts or time.strftime("%Y%m%d_%H%M%S")
    cfg_tag = Path(config_path).stem
    return f"main_{script_name}_{ts}_{cfg_tag}.log"


def update_latest_link(log_file: Path) -> Path:
    """Point <log_dir>/latest.log at ``log_file`` with a relative symlink.

    Built under a temporary name and renamed over the old link so readers
    never see it missing.
    """
    link = log_file.parent / LATEST_LINK
    tmp = log_file.parent / f".{LATEST_LINK}.{os.getpid()}"
    if tmp.is_symlink() or tmp.exists():
        tmp.unlink()
    os.symlink(log_file.name, tmp)
    os.replace(tmp, link)
    return link


def create_log_file(log_dir: Path, script_name: str, config_path: Union[str, Path], ts: Optional[str] = None) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name(script_name, config_path, ts)
    log_file.touch()
    update_latest_link(log_file)
    return log_file


def build_env(root: Path) -> dict:
    env = os.environ.copy()
    # Training scripts import sibling code relative to the repo root
    env["PYTHONPATH"] = str(root)
    return env


def launch(
    settings: LauncherSettings,
    script_name: str,
    config_path: Union[str, Path],
    args: Sequence[str],
    ts: Optional[str] = None,
) -> LaunchRecord:
    """Start ``<python> <entry point> <args...>`` detached, output appended to a fresh log.

    The process gets its own session, so closing the terminal or hitting
    Ctrl-C in it does not reach the training run.

    Raises:
        ScriptNotFound: entry point missing
        SpawnFailure: the log file could not be created, or the process
            could not be started (log file may exist)
    """
    entry_point = resolve_entry_point(settings, script_name)
    root = settings.root_path
    command = [settings.python_executable(), str(entry_point), *[str(a) for a in args]]

    try:
        log_file = create_log_file(settings.log_path, script_name, config_path, ts)
    except OSError as e:
        raise SpawnFailure(f"Failed to create log file under {settings.log_path}: {e}") from e
    logger.debug("Log file: %s", log_file)

    try:
        with open(log_file, "ab") as log:
            process = subprocess.Popen(
                command,
                stdout=log,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                cwd=str(root),
                env=build_env(root),
                start_new_session=True,
            )
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        raise SpawnFailure(f"Failed to start the background process: {e}") from e

    if not process.pid:
        raise SpawnFailure("Failed to start the background process: no pid")

    pid_path = write_pid(settings.log_path, script_name, process.pid)
    logger.info("Started %s (pid %d)", script_name, process.pid)
    return LaunchRecord(
        pid=process.pid,
        log_file=log_file,
        pid_file=pid_path,
        command=command,
        process=process,
    )

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

PULL_COMMAND = ("git", "pull", "--rebase", "--autostash")


def pull_latest(
    root: Union[str, Path],
    command: Sequence[str] = PULL_COMMAND,
    timeout: Optional[float] = 300,
) -> bool:
    """Best-effort repository update before launching.

    Never raises: a missing git, a non-repo root, a conflict or a timeout
    is logged as a warning and the launch goes ahead.
    """
    try:
        proc = subprocess.run(
            list(command),
            cwd=str(root),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("git pull failed (continuing anyway): %s", e)
        return False

    if proc.returncode != 0:
        msg = (proc.stderr or proc.stdout or "").strip().splitlines()
        logger.warning(
            "git pull failed (continuing anyway): exit %d%s",
            proc.returncode,
            f" - {msg[-1]}" if msg else "",
        )
        return False

    summary = (proc.stdout or "").strip().splitlines()
    logger.info("git pull: %s", summary[-1] if summary else "ok")
    return True

from __future__ import annotations

import logging
import os
import sys
import threading
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional, Union

logger = logging.getLogger(__name__)


class FollowState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    STOPPED = "stopped"


class TailReader:
    """Incremental reader over an append-only file.

    Remembers its byte offset between calls; each ``read_available`` returns
    only what was appended since the previous call.
    """

    def __init__(self, path: Union[str, Path], offset: int = 0, chunk_size: int = 64 * 1024):
        self.path = Path(path)
        self.offset = offset
        self.chunk_size = chunk_size
        self._fh: Optional[BinaryIO] = None

    def _open(self) -> bool:
        if self._fh is None:
            try:
                self._fh = open(self.path, "rb")
            except FileNotFoundError:
                return False
        return True

    def read_available(self) -> bytes:
        if not self._open():
            return b""
        size = os.fstat(self._fh.fileno()).st_size
        if size < self.offset:
            # Truncated underneath us; start over
            self.offset = 0
        self._fh.seek(self.offset)
        data = self._fh.read(self.chunk_size)
        self.offset += len(data)
        return data

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class LogFollower:
    """Stream a log file to the console while a process runs.

    Idle -> Streaming on ``start``; Streaming -> Stopped on ``stop``.
    Stopping never touches the process being followed.
    """

    def __init__(
        self,
        log_file: Union[str, Path],
        out: Optional[BinaryIO] = None,
        poll_interval: float = 0.2,
    ):
        self.reader = TailReader(log_file)
        self.out = out
        self.poll_interval = poll_interval
        self.state = FollowState.IDLE
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _emit(self, data: bytes) -> None:
        out = self.out if self.out is not None else sys.stdout.buffer
        out.write(data)
        out.flush()

    def _run(self) -> None:
        while not self._stop.is_set():
            data = self.reader.read_available()
            if data:
                self._emit(data)
            else:
                self._stop.wait(self.poll_interval)

    def start(self) -> None:
        if self.state is not FollowState.IDLE:
            raise RuntimeError(f"Follower already {self.state.value}")
        self.state = FollowState.STREAMING
        self._thread = threading.Thread(target=self._run, name="log-follower", daemon=True)
        self._thread.start()

    def stop(self, drain: bool = True) -> None:
        """Stop streaming. With ``drain``, flush whatever is left in the file first."""
        if self.state is not FollowState.STREAMING:
            return
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        if drain:
            data = self.reader.read_available()
            while data:
                self._emit(data)
                data = self.reader.read_available()
        self.reader.close()
        self.state = FollowState.STOPPED

    def follow(self, process) -> Optional[int]:
        """Stream until ``process`` exits or the operator hits Ctrl-C.

        Returns the exit status, or None when interrupted. A non-zero exit is
        not an error here.
        """
        self.start()
        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            logger.debug("Interrupted; leaving pid %s running", process.pid)
            self.stop(drain=False)
            return None
        self.stop(drain=True)
        return returncode

from .follower import FollowState, LogFollower, TailReader
from .hooks import pull_latest
from .launcher import LaunchRecord, launch, resolve_entry_point
from .registry import pid_file, write_pid
from .synthesis import (
    RESERVED_KEYS,
    DerivedPaths,
    ReservedKey,
    Synthesis,
    derive_paths,
    format_command,
    synthesize,
)

__all__ = [
    "FollowState",
    "LogFollower",
    "TailReader",
    "pull_latest",
    "LaunchRecord",
    "launch",
    "resolve_entry_point",
    "pid_file",
    "write_pid",
    "RESERVED_KEYS",
    "DerivedPaths",
    "ReservedKey",
    "Synthesis",
    "derive_paths",
    "format_command",
    "synthesize",
]

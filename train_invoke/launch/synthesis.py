from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Sequence

from train_invoke.errors import SynthesisError

logger = logging.getLogger(__name__)

DEFAULT_D = "UnknownD"
DEFAULT_T = "UnknownT"
DEFAULT_FOLD = 0


class ReservedKey(str, Enum):
    """Config keys consumed for path derivation or special flags."""

    ROOT_DIR = "root_dir"
    SCRATCH = "scratch"
    LOG_DIR = "log_dir"
    K_FOLD_ID = "k-fold-id"


RESERVED_KEYS = frozenset(key.value for key in ReservedKey)


@dataclass(frozen=True)
class DerivedPaths:
    log_path: str
    root_path: str


@dataclass
class Synthesis:
    paths: DerivedPaths
    args: List[str]

    @property
    def log_path(self) -> str:
        return self.paths.log_path

    @property
    def root_path(self) -> str:
        return self.paths.root_path


def derive_paths(config: Mapping[str, Any], script_name: str) -> DerivedPaths:
    """<log_dir>/<d>_2_<t>/<script>/k-fold-<id> and <root_dir>/k-fold-<id>."""
    d_val = config.get("d", DEFAULT_D)
    t_val = config.get("t", DEFAULT_T)
    root_val = config.get(ReservedKey.ROOT_DIR.value, "")
    log_val = config.get(ReservedKey.LOG_DIR.value, "")
    fold_id = config.get(ReservedKey.K_FOLD_ID.value, DEFAULT_FOLD)

    fold_dir = f"k-fold-{fold_id}"
    return DerivedPaths(
        log_path=os.path.join(log_val, f"{d_val}_2_{t_val}", script_name, fold_dir),
        root_path=os.path.join(root_val, fold_dir),
    )


# --- reserved key rules ----------------------------------------------------

TokenRule = Callable[[Mapping[str, Any], DerivedPaths], List[str]]


def _root_dir_tokens(config: Mapping[str, Any], paths: DerivedPaths) -> List[str]:
    # Positional, no flag prefix
    if ReservedKey.ROOT_DIR.value in config:
        return [paths.root_path]
    return []


def _scratch_tokens(config: Mapping[str, Any], paths: DerivedPaths) -> List[str]:
    # Only a real boolean true; "true" strings and 1 do not count
    if config.get(ReservedKey.SCRATCH.value) is True:
        return ["--scratch"]
    return []


def _path_only_tokens(config: Mapping[str, Any], paths: DerivedPaths) -> List[str]:
    return []


# Evaluated in enum order, which is also the emitted order
RESERVED_RULES: Dict[ReservedKey, TokenRule] = {
    ReservedKey.ROOT_DIR: _root_dir_tokens,
    ReservedKey.SCRATCH: _scratch_tokens,
    ReservedKey.LOG_DIR: _path_only_tokens,
    ReservedKey.K_FOLD_ID: _path_only_tokens,
}


def flag_tokens(key: str, value: Any) -> List[str]:
    """Generic rule: ``-k value`` for one-letter keys, ``--key value`` otherwise.

    Empty values are kept as an empty token.
    """
    prefix = "-" if len(key) == 1 else "--"
    return [f"{prefix}{key}", str(value)]


def synthesize(config: Mapping[str, Any], script_name: str) -> Synthesis:
    """Turn a flat config mapping into the training script's argument vector.

    Order: ``--log <path>``, positional root path, ``--scratch``, then every
    non-reserved key in document order.

    Raises:
        SynthesisError: on any failure while extracting or formatting values
    """
    try:
        paths = derive_paths(config, script_name)
        args = ["--log", paths.log_path]

        for key in ReservedKey:
            args.extend(RESERVED_RULES[key](config, paths))

        for key, value in config.items():
            if key not in RESERVED_KEYS:
                args.extend(flag_tokens(key, value))
    except Exception as e:
        raise SynthesisError(f"Failed to build arguments for '{script_name}': {e}") from e

    logger.debug("Synthesized %d tokens for %s", len(args), script_name)
    return Synthesis(paths=paths, args=args)


def format_command(tokens: Sequence[str]) -> str:
    """Shell-quoted rendering, for display only."""
    return shlex.join([str(t) for t in tokens])

from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from typing import Union

import yaml
from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import (
    GrammarParseError,
    InterpolationResolutionError,
    MissingMandatoryValue,
    OmegaConfBaseException,
)

from train_invoke.errors import ConfigExtensionInvalid, ConfigNotFound, ConfigParseError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".yaml", ".yml")
SCALAR_TYPES = (str, int, float, bool, type(None))
UNRESOLVED_ERRORS = (InterpolationResolutionError, GrammarParseError, MissingMandatoryValue)

Scalar = Union[str, int, float, bool, None]


def check_config_path(path: Union[str, Path]) -> Path:
    """Existence first, then extension. A missing ``run.txt`` is not-found."""
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigNotFound("Config file not found", str(path))
    if not config_path.name.endswith(ALLOWED_EXTENSIONS):
        raise ConfigExtensionInvalid("Config must be a .yaml/.yml file", str(path))
    return config_path


def load_config(path: Union[str, Path]) -> "OrderedDict[str, Scalar]":
    """Parse a YAML config into an ordered mapping of flat scalar values.

    Interpolations (``${other_key}``) are resolved where possible; values that
    do not resolve (``run_${USER}``, ``???``) are kept as literal text. Nested
    mappings and lists are rejected since nothing downstream knows how to turn
    them into flags.

    Raises:
        ConfigNotFound: path does not exist
        ConfigExtensionInvalid: not a .yaml/.yml file
        ConfigParseError: invalid YAML, non-mapping root or nested values
    """
    config_path = check_config_path(path)

    try:
        cfg = OmegaConf.load(config_path)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except (OmegaConfBaseException, OSError, ValueError) as e:
        raise ConfigParseError(f"Could not load {config_path}: {e}") from e

    if not isinstance(cfg, DictConfig):
        raise ConfigParseError("YAML root must be a mapping", str(config_path))

    raw = OmegaConf.to_container(cfg, resolve=False)

    result: "OrderedDict[str, Scalar]" = OrderedDict()
    for key, value in raw.items():
        try:
            value = cfg[key]
        except UNRESOLVED_ERRORS as e:
            # Not an interpolation we can resolve; pass the text through as written
            logger.debug("Keeping literal value for '%s': %s", key, e)
        if not isinstance(value, SCALAR_TYPES):
            raise ConfigParseError(
                f"Value for '{key}' must be a scalar, got {type(value).__name__}",
                str(config_path),
            )
        result[str(key)] = value

    logger.debug("Loaded %d keys from %s", len(result), config_path)
    return result

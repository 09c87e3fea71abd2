import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from train_invoke.errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "invoke.yaml"
VENV_PYTHON = ".venv/bin/python"
DEFAULT_ENTRY_TEMPLATE = "examples/domain_adaptation/image_classification/{script}.py"


@dataclass
class LauncherSettings:
    # Empty root means the current working directory
    root: str = ""
    # Empty python means <root>/.venv/bin/python if present, else this interpreter
    python: str = ""
    entry_template: str = DEFAULT_ENTRY_TEMPLATE
    log_dir: str = "logs"
    # Relative to root; empty means console only
    launcher_log: str = ""
    pull: bool = True
    poll_interval: float = 0.2

    @property
    def root_path(self) -> Path:
        return Path(self.root or ".").resolve()

    @property
    def log_path(self) -> Path:
        return self.root_path / self.log_dir

    @property
    def launcher_log_path(self) -> Optional[Path]:
        if not self.launcher_log:
            return None
        return self.root_path / self.launcher_log

    def python_executable(self) -> str:
        if self.python:
            return self.python
        venv = self.root_path / VENV_PYTHON
        if venv.is_file():
            return str(venv)
        return sys.executable


def load_settings(root: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> LauncherSettings:
    """Merge dataclass defaults, ``<root>/invoke.yaml`` and explicit overrides.

    Overrides whose value is None are treated as "not given" so CLI options
    left at their default never shadow the settings file.
    """
    base = OmegaConf.structured(LauncherSettings)
    layers = [base]

    root_dir = Path(root or ".").resolve()
    settings_file = root_dir / SETTINGS_FILE
    try:
        if settings_file.is_file():
            logger.debug("Reading launcher settings from %s", settings_file)
            layers.append(OmegaConf.load(settings_file))

        explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
        explicit["root"] = str(root_dir)
        layers.append(OmegaConf.create(explicit))

        merged = OmegaConf.merge(*layers)
        settings = OmegaConf.to_object(merged)
    except (OmegaConfBaseException, yaml.YAMLError, OSError) as e:
        raise SettingsError(f"Invalid launcher settings: {e}") from e

    if settings.poll_interval <= 0:
        raise SettingsError(f"poll_interval must be positive, got {settings.poll_interval}")
    if "{script}" not in settings.entry_template:
        raise SettingsError(f"entry_template must contain '{{script}}': {settings.entry_template}")
    return settings

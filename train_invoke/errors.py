from __future__ import annotations


class InvokeError(Exception):
    """Base class for every launcher failure."""


class SettingsError(InvokeError):
    """Launcher settings could not be built."""


class ConfigError(InvokeError):
    """The configuration document could not be used."""

    def __init__(self, message: str, path: str = ""):
        if path:
            super().__init__(f"{message}: {path}")
        else:
            super().__init__(message)
        self.path = path


class ConfigNotFound(ConfigError):
    pass


class ConfigExtensionInvalid(ConfigError):
    pass


class ConfigParseError(ConfigError):
    pass


class ScriptNotFound(InvokeError):
    pass


class SynthesisError(InvokeError):
    pass


class SpawnFailure(InvokeError):
    pass

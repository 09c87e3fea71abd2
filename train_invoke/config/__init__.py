from .loader import ALLOWED_EXTENSIONS, check_config_path, load_config

__all__ = [
    "ALLOWED_EXTENSIONS",
    "check_config_path",
    "load_config",
]

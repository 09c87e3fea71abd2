"""Launch detached training runs from YAML configs."""

__version__ = "0.1.0"

"""Exceptions raised by ddiff."""


class DDiffError(Exception):
    """Base exception for ddiff errors."""

    pass


class PathResolutionError(DDiffError):
    """Raised when a comparison root cannot be resolved to a directory."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ConfigError(DDiffError):
    """Raised when a configuration file cannot be loaded."""

    pass

"""Errors raised by the converter."""


class RabbitConvertorError(Exception):
    """Base class for converter errors."""


class DirectoryCreationError(RabbitConvertorError):
    """The slide image directory could not be created."""

    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"cannot create slide image directory {path}: {reason}")


class CaptureError(RabbitConvertorError):
    """A slide was saved outside of an isolated invocation."""


class ConfigError(RabbitConvertorError, ValueError):
    """Invalid converter configuration."""

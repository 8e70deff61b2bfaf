"""Errors raised by the slide renderer."""


class RabbitError(Exception):
    """Renderer usage, source or rendering error."""


class UsageError(RabbitError):
    """Invalid command-line arguments for the renderer."""


class SourceError(RabbitError):
    """The slide source could not be read."""

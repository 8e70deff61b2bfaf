"""
Slide sources: where the renderer reads its markup from.
"""
from pathlib import Path

from .errors import SourceError


class Source:
    """Base class for a slide source."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read(self) -> str:
        raise NotImplementedError


class StringObjectSource(Source):
    """Markup handed to the renderer directly as a string."""

    initial_args_description = "[markup-text]"

    def __init__(self, text: str, encoding: str = "utf-8"):
        super().__init__(encoding)
        self._text = text

    def read(self) -> str:
        return self._text


class FileSource(Source):
    """Markup read from a file on disk."""

    initial_args_description = "[file]"

    def __init__(self, path, encoding: str = "utf-8"):
        super().__init__(encoding)
        self.path = Path(path)

    def read(self) -> str:
        try:
            return self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceError(f"cannot read slide source {self.path}: {exc}") from exc


SOURCE_TYPES = {
    "stringobject": StringObjectSource,
    "file": FileSource,
}


def create_source(source_type: str, argument: str, encoding: str = "utf-8") -> Source:
    """Instantiate the source registered under *source_type*."""
    try:
        source_class = SOURCE_TYPES[source_type]
    except KeyError:
        raise SourceError(
            f"unknown source type '{source_type}'. Available: {sorted(SOURCE_TYPES)}"
        ) from None
    return source_class(argument, encoding=encoding)

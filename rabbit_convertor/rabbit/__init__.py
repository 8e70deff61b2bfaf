"""
Slide renderer: Markdown slide markup to slide images and HTML.

The renderer is self-contained; the converter plugs into it through
heading handlers and slide sinks.
"""
from .command import run
from .errors import RabbitError
from .generator import FileSlideSink, HTMLGenerator, SlideSink
from .parser import NoteSetter, SlideParser
from .slide import Canvas, Slide

__all__ = [
    "run",
    "RabbitError",
    "FileSlideSink",
    "HTMLGenerator",
    "SlideSink",
    "NoteSetter",
    "SlideParser",
    "Canvas",
    "Slide",
]

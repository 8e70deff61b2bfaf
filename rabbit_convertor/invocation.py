"""
Run the slide renderer in an isolated worker thread.

The renderer only reports results through its sink, so every invocation gets
a dedicated thread with its own capture storage. The caller blocks until the
thread is done and gets a plain return value, or the renderer's exception.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .capture import CaptureSlideSink, CaptureStorage, capture_scope
from .comment import CommentExtension
from .rabbit import command

logger = logging.getLogger(__name__)


@dataclass
class SlideDescriptor:
    index: int
    title: str
    image_path: str
    width: int
    height: int
    comments: List[str] = field(default_factory=list)


@dataclass
class InvocationResult:
    slides: List[SlideDescriptor]
    text: str


def build_args(text: str, *, width: int, height: int, base_name: str,
               log_level: str = "info", encoding: str = "utf-8",
               rasterizer: str = "browser") -> List[str]:
    """Renderer argument vector for rendering *text* from memory."""
    return [
        "-s",
        "-S", f"{width},{height}",
        "-b", base_name,
        "--output-html",
        "--logger", "host",
        "--log-level", log_level,
        "-e", encoding,
        "--rasterizer", rasterizer,
        "-T", "stringobject", "--", text,
    ]


def run_isolated(text: str, *, width: int, height: int, base_name: str,
                 log_level: str = "info", encoding: str = "utf-8",
                 rasterizer: str = "browser") -> InvocationResult:
    """
    Render *text* and collect every slide it produced.

    Raises whatever the renderer raised, unchanged.
    """
    args = build_args(text, width=width, height=height, base_name=base_name,
                      log_level=log_level, encoding=encoding, rasterizer=rasterizer)
    logger.debug(f"Rendering with {args[:-1]!r} + source text")

    captured: List[Optional[CaptureStorage]] = [None]

    def _worker():
        with capture_scope() as storage:
            captured[0] = storage
            try:
                command.run(*args, heading_handlers=[CommentExtension()], sink=CaptureSlideSink())
            except BaseException as exc:
                storage.exception = exc

    worker = threading.Thread(target=_worker, name="rabbit-render")
    worker.start()
    worker.join()

    storage = captured[0]
    if storage.exception is not None:
        raise storage.exception

    slides = [
        SlideDescriptor(
            index=index,
            title=storage.titles.get(index, ""),
            image_path=storage.images[index],
            width=width,
            height=height,
            comments=storage.comments.get(index, []),
        )
        for index in sorted(storage.images)
    ]
    logger.debug(f"Captured {len(slides)} slides, {len(storage.text)} characters of HTML")
    return InvocationResult(slides=slides, text=storage.text)

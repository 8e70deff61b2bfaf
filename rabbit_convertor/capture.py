"""
Capture slides produced by the renderer.

The renderer hands every saved slide to its sink and returns nothing useful,
so :class:`CaptureSlideSink` stores what it receives in the capture storage
of the thread running the renderer. Each isolated invocation activates its
own storage with :func:`capture_scope`.
"""
import hashlib
import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
from urllib.parse import unquote

from markdown_it.common.utils import escapeHtml

from .comment import slide_comments
from .errors import CaptureError
from .rabbit.generator import HTMLGenerator, SlideSink
from .rabbit.slide import Slide

logger = logging.getLogger(__name__)

# Font wrappers around slide text; decoration tags are left alone.
SPAN_TAG = re.compile(r"</?span[^>]*>")


@dataclass
class CaptureStorage:
    """Everything one renderer run produced, keyed by slide number."""
    images: Dict[int, str] = field(default_factory=dict)
    titles: Dict[int, str] = field(default_factory=dict)
    comments: Dict[int, List[str]] = field(default_factory=dict)
    result: List[str] = field(default_factory=list)
    exception: Optional[BaseException] = None

    @property
    def text(self) -> str:
        return "".join(self.result)


_local = threading.local()


@contextmanager
def capture_scope() -> Iterator[CaptureStorage]:
    """Activate a fresh, empty capture storage for the current thread."""
    previous = getattr(_local, "storage", None)
    storage = CaptureStorage()
    _local.storage = storage
    try:
        yield storage
    finally:
        _local.storage = previous


def current_capture() -> CaptureStorage:
    storage = getattr(_local, "storage", None)
    if storage is None:
        raise CaptureError("slide saved outside of an isolated invocation")
    return storage


def slide_label(index: int, digest: str) -> str:
    return f"slide-{index}-{digest}"


# ----------------------------------------------------------------------
# Render rules keeping inline decorations in the captured HTML
# ----------------------------------------------------------------------
def _render_em_open(self, tokens, idx, options, env):
    return "<em class='emphasis'>"


def _render_code_inline(self, tokens, idx, options, env):
    return f"<code class='code'>{escapeHtml(tokens[idx].content)}</code>"


def _render_strong_open(self, tokens, idx, options, env):
    return "<strong class='keyword'>"


def _render_s_open(self, tokens, idx, options, env):
    return "<del>"


def _render_s_close(self, tokens, idx, options, env):
    return "</del>"


def _render_link_open(self, tokens, idx, options, env):
    """Links to a slide number or heading text point at that slide."""
    token = tokens[idx]
    target = token.attrGet("href") or ""
    html_id = env.get("html_labels", {}).get(unquote(target))
    attrs = dict(token.attrs)
    attrs["href"] = f"#{html_id}" if html_id else target
    rendered = "".join(f" {name}='{escapeHtml(str(value))}'" for name, value in attrs.items())
    return f"<a{rendered}>"


DECORATION_RULES = {
    "em_open": _render_em_open,
    "strong_open": _render_strong_open,
    "code_inline": _render_code_inline,
    "s_open": _render_s_open,
    "s_close": _render_s_close,
    "link_open": _render_link_open,
}


class CaptureSlideSink(SlideSink):
    """
    Divert slides into the active capture storage.

    Images are still written by the generator; the combined HTML page the
    renderer would normally write is skipped.
    """

    def prepare(self, generator: HTMLGenerator) -> None:
        digest = hashlib.md5(generator.canvas.source.encode(generator.encoding)).hexdigest()

        labels = {}
        for slide in generator.canvas.slides:
            html_id = slide_label(slide.index, digest)
            labels[str(slide.index)] = html_id
            for heading in slide.headings():
                labels[heading] = html_id
        generator.html_labels = labels

        for name, rule in DECORATION_RULES.items():
            generator.markdown_processor.add_render_rule(name, rule)

    def save_slide(self, generator: HTMLGenerator, slide: Slide, index: int) -> None:
        storage = current_capture()

        html = [f"<div class='slide-and-comment' id='{generator.h(generator.html_labels[str(index)])}'>"]
        html.append(SPAN_TAG.sub("", generator.slide_to_html(slide)))

        comments = [generator.render_blocks([block], font=False) for block in slide_comments(slide)]
        if comments:
            div_class = "slide-comment"
            if slide.is_title_slide:
                div_class += " title-slide-comment"
            html.append(f"<div class='{generator.h(div_class)}'>")
            html.extend(comments)
            html.append("</div>")

        html.append("</div>")

        storage.images[index] = generator.image_filename(index)
        storage.titles[index] = slide.title
        storage.comments[index] = comments
        storage.result.append("".join(html))
        logger.debug(f"Captured slide #{index} {slide.title!r}")

    def output_html(self, generator: HTMLGenerator) -> None:
        pass

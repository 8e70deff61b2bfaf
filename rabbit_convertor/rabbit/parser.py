"""
Slide markup parser.

A ``.rab`` document is Markdown where every level-1 heading opens a new slide
and the first slide is the title slide. Other headings are offered to the
registered heading handlers first; a handler may claim a heading and return a
*note setter* that receives everything nested under it instead of the slide.
"""
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.attrs import attrs_plugin
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from .logger import Logger, StderrLogger
from .slide import Block, Canvas, Slide, heading_level, heading_text


class NoteSetter:
    """Receives the blocks nested under a claimed heading."""

    def apply(self, block: Block) -> None:
        raise NotImplementedError


# (level, title, slides parsed so far) -> NoteSetter or None
HeadingHandler = Callable[[int, str, Sequence[Slide]], Optional[NoteSetter]]


def create_markdown() -> MarkdownIt:
    """markdown-it instance configured for slide markup."""
    md = MarkdownIt("commonmark", {"html": True})
    md.enable(["table", "strikethrough"])
    return (
        md.use(attrs_plugin)              # {.class #id key=val}
          .use(container_plugin, "note")  # ::: note call-out boxes
          .use(front_matter_plugin)       # deck metadata, not rendered
    )


def top_level_blocks(tokens: Iterable[Token]) -> Iterator[Block]:
    """Group a flat token stream into top-level blocks."""
    block: Block = []
    depth = 0
    for token in tokens:
        block.append(token)
        depth += token.nesting
        if depth == 0:
            yield block
            block = []
    if block:
        yield block


class SlideParser:
    """
    Parse slide markup into a :class:`Canvas`.
    """

    def __init__(self, *, heading_handlers: Iterable[HeadingHandler] = (), logger: Logger = None):
        self.heading_handlers: List[HeadingHandler] = list(heading_handlers)
        self.logger = logger or StderrLogger()
        self.markdown_processor = create_markdown()

    def parse(self, text: str) -> Canvas:
        canvas = Canvas(source=text)
        slides = canvas.slides

        setter: Optional[NoteSetter] = None
        setter_level = 0

        for block in top_level_blocks(self.markdown_processor.parse(text)):
            level = heading_level(block)

            if level == 1:
                setter = None
                slides.append(Slide(index=len(slides), title=heading_text(block), blocks=[block]))
                continue

            if level:
                if setter is not None and level <= setter_level:
                    setter = None
                if setter is None:
                    claimed = self._claim_heading(level, heading_text(block), slides)
                    if claimed is not None:
                        setter, setter_level = claimed, level
                        continue

            if setter is not None:
                setter.apply(block)
            elif slides:
                slides[-1].blocks.append(block)
            elif block[0].type != "front_matter":
                self.logger.warning(f"ignoring {block[0].type} before the first slide")

        self.logger.debug(f"parsed {len(slides)} slides")
        return canvas

    def _claim_heading(self, level: int, title: str, slides: Sequence[Slide]) -> Optional[NoteSetter]:
        for handler in self.heading_handlers:
            setter = handler(level, title, slides)
            if setter is not None:
                return setter
        return None

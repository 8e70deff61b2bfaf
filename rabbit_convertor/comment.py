"""
Commentary for slides.

A second-level heading titled ``comment`` (any case) does not appear on the
slide. Everything nested under it is attached to the slide being written and
ends up next to the slide in the generated HTML::

    # Title

    ## comment

    Shown in the HTML, not on the slide image.
"""
import logging
import re
from typing import Optional, Sequence

from .rabbit.parser import NoteSetter
from .rabbit.slide import Block, Slide

logger = logging.getLogger(__name__)

COMMENT_KEYWORD = "comment"
COMMENT_LEVEL = 2
_COMMENT_TITLE = re.compile(re.escape(COMMENT_KEYWORD), re.IGNORECASE)


class CommentNoteSetter(NoteSetter):
    def __init__(self, slide: Slide):
        self.slide = slide

    def apply(self, block: Block) -> None:
        self.slide.annotations.setdefault(COMMENT_KEYWORD, []).append(block)


class CommentExtension:
    """Heading handler claiming ``## comment`` headings."""

    def __call__(self, level: int, title: str, slides: Sequence[Slide]) -> Optional[CommentNoteSetter]:
        if level != COMMENT_LEVEL or not _COMMENT_TITLE.fullmatch(title):
            return None
        if not slides:
            logger.warning("Comment heading before the first slide ignored")
            return None
        return CommentNoteSetter(slides[-1])


def slide_comments(slide: Slide) -> Sequence[Block]:
    return slide.annotations.get(COMMENT_KEYWORD, [])

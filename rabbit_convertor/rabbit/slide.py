"""
Data models for parsed slides.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from markdown_it.token import Token

# A block is one top-level markdown-it construct: a heading, a paragraph, a
# whole list, a fence... stored as its flat token sequence.
Block = List[Token]


def inline_text(token: Token) -> str:
    """Plain text of an inline token, markup removed."""
    if not token.children:
        return token.content
    parts = []
    for child in token.children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(inline_text(child))
    return "".join(parts)


def heading_level(block: Block) -> int:
    """Heading level of *block*, or 0 if it is not a heading."""
    if block and block[0].type == "heading_open":
        return int(block[0].tag[1:])
    return 0


def heading_text(block: Block) -> str:
    return inline_text(block[1]) if len(block) > 1 else ""


@dataclass
class Slide:
    """
    One slide of a deck. ``blocks`` holds the slide body including its own
    title heading; ``annotations`` holds anything extensions attach to the
    slide without putting it on the slide itself.
    """
    index: int
    title: str
    blocks: List[Block] = field(default_factory=list)
    annotations: Dict[str, List[Any]] = field(default_factory=dict)

    @property
    def is_title_slide(self) -> bool:
        return self.index == 0

    def headings(self) -> List[str]:
        """Plain text of every heading on the slide body."""
        return [heading_text(block) for block in self.blocks if heading_level(block)]


@dataclass
class Canvas:
    """Source text plus the slides parsed from it."""
    source: str
    slides: List[Slide] = field(default_factory=list)

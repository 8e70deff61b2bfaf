"""
Container format carrying one rendered deck through a single string.

::

    <!-- begin rabbit-content DIGEST -->
    <!-- meta
    title TITLE
    image IMAGE_URL
    width WIDTH
    height HEIGHT
    -->
    <!-- begin slide -->
    SLIDE_HTML
    <!-- end slide -->
    <!-- begin text -->
    TEXT
    <!-- end text -->
    <!-- end rabbit-content DIGEST -->

Reading is done line by line. Every marker must be a whole line and every
closing marker must be followed by a newline; a container whose end marker
carries a different digest, or that never ends, is not a container.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

CONTAINER_BEGIN = re.compile(r"<!-- begin rabbit-content ([0-9a-f]{32}) -->")
CONTAINER_END = "<!-- end rabbit-content {digest} -->"
META_BEGIN = "<!-- meta"
META_END = "-->"
SLIDE_BEGIN = "<!-- begin slide -->"
SLIDE_END = "<!-- end slide -->"
TEXT_BEGIN = "<!-- begin text -->"
TEXT_END = "<!-- end text -->"

META_LINE = re.compile(r"(\S+)[ \t]+(.*)")


@dataclass
class RenderResult:
    digest: str
    title: Optional[str]
    image: Optional[str]
    width: int
    height: int
    slide_html: str
    text: str


def _chomp(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def encode(result: RenderResult) -> str:
    """Serialize *result* into a container string."""
    lines = [
        f"<!-- begin rabbit-content {result.digest} -->",
        META_BEGIN,
        f"title {result.title or ''}",
        f"image {result.image or ''}",
        f"width {result.width}",
        f"height {result.height}",
        META_END,
        SLIDE_BEGIN,
        _chomp(result.slide_html),
        SLIDE_END,
        TEXT_BEGIN,
        _chomp(result.text),
        TEXT_END,
        CONTAINER_END.format(digest=result.digest),
    ]
    return "\n".join(lines) + "\n"


def _find_region(lines: List[str], begin: str, end: str, start: int = 0,
                 trailing_newline: bool = True) -> Optional[Tuple[int, int]]:
    """
    Locate the first ``begin`` .. ``end`` line pair at or after *start*.

    Returns the (begin, end) line indexes. The end line must be separated from
    the begin line by at least one line, and followed by another line (that
    is, a newline) when *trailing_newline* is set.
    """
    last = len(lines) - 1 if trailing_newline else len(lines)
    for b in range(start, len(lines)):
        if lines[b] != begin:
            continue
        for e in range(b + 2, last):
            if lines[e] == end:
                return b, e
    return None


def extract_containers(text: str) -> List[Tuple[str, str]]:
    """Every well-formed container in *text* as ``(digest, inner)``, in order."""
    lines = text.split("\n")
    found = []
    i = 0
    while i < len(lines):
        match = CONTAINER_BEGIN.fullmatch(lines[i])
        if match is None:
            i += 1
            continue
        digest = match.group(1)
        region = _find_region(lines, lines[i], CONTAINER_END.format(digest=digest), start=i)
        if region is None:
            i += 1
            continue
        begin, end = region
        found.append((digest, "\n".join(lines[begin + 1:end])))
        i = end + 1
    return found


def extract_html(text: str) -> List[str]:
    """Inner contents of every container in *text*."""
    return [inner for _, inner in extract_containers(text)]


def extract_meta(inner: str) -> Dict[str, str]:
    """
    Key/value pairs of the meta block(s) in a container's inner content.

    An empty mapping means *inner* is not a recognized container.
    """
    meta: Dict[str, str] = {}
    lines = inner.split("\n")
    start = 0
    while True:
        region = _find_region(lines, META_BEGIN, META_END, start=start)
        if region is None:
            return meta
        begin, end = region
        for line in lines[begin + 1:end]:
            match = META_LINE.match(line)
            if match:
                meta[match.group(1)] = match.group(2)
        start = end + 1


def extract_slide_html(inner: str) -> Optional[str]:
    """Slide HTML region of a container's inner content, if any."""
    lines = inner.split("\n")
    region = _find_region(lines, SLIDE_BEGIN, SLIDE_END)
    if region is None:
        return None
    begin, end = region
    return "\n".join(lines[begin + 1:end])


def extract_text(inner: str) -> Optional[str]:
    """Text region of a container's inner content, if any."""
    lines = inner.split("\n")
    # the text region closes the container, so nothing follows its end marker
    region = _find_region(lines, TEXT_BEGIN, TEXT_END, trailing_newline=False)
    if region is None:
        return None
    begin, end = region
    return "\n".join(lines[begin + 1:end])


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def decode(text: str) -> List[RenderResult]:
    """Every recognized container in *text* as a :class:`RenderResult`."""
    results = []
    for digest, inner in extract_containers(text):
        meta = extract_meta(inner)
        if not meta:
            continue
        results.append(RenderResult(
            digest=digest,
            title=meta.get("title") or None,
            image=meta.get("image") or None,
            width=_to_int(meta.get("width")),
            height=_to_int(meta.get("height")),
            slide_html=extract_slide_html(inner) or "",
            text=extract_text(inner) or "",
        ))
    return results

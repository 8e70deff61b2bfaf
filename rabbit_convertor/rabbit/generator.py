"""
HTML generator: renders every slide to an image and to HTML.

Persistence goes through a :class:`SlideSink`. The default sink writes one
HTML page per slide and an index page; embedders pass their own sink to
receive the slides instead.
"""
import asyncio
import html
from pathlib import Path
from typing import Dict, List

from .logger import Logger, StderrLogger
from .parser import create_markdown
from .rasterizer import Rasterizer
from .slide import Block, Canvas, Slide

SLIDE_CSS = """
html, body { margin: 0; padding: 0; }
.slide {
  box-sizing: border-box;
  width: %(width)dpx;
  height: %(height)dpx;
  padding: %(padding)dpx;
  overflow: hidden;
  font-family: sans-serif;
  background: white;
}
.slide h1 { text-align: center; }
"""


# Headings and paragraphs get an inline font wrapper sized to the slide.
def _render_font_open(self, tokens, idx, options, env):
    token = tokens[idx]
    tag = self.renderToken(tokens, idx, options, env)
    size = env.get("font_sizes", {}).get(token.tag)
    if token.hidden or not size:
        return tag
    return f"{tag}<span style='font-size: {size}px'>"


def _render_font_close(self, tokens, idx, options, env):
    token = tokens[idx]
    tag = self.renderToken(tokens, idx, options, env)
    size = env.get("font_sizes", {}).get(token.tag)
    if token.hidden or not size:
        return tag
    return f"</span>{tag}"


class SlideSink:
    """Where the generator persists slides."""

    def prepare(self, generator: "HTMLGenerator") -> None:
        """Called once before the first slide is saved."""

    def save_slide(self, generator: "HTMLGenerator", slide: Slide, index: int) -> None:
        raise NotImplementedError

    def output_html(self, generator: "HTMLGenerator") -> None:
        """Called once after every slide is saved."""


class FileSlideSink(SlideSink):
    """Write ``<base>N.html`` per slide and ``<base>.html`` as an index."""

    def save_slide(self, generator, slide, index):
        path = Path(f"{generator.base_name}{index}.html")
        path.write_text(generator.slide_document(slide), encoding=generator.encoding)

    def output_html(self, generator):
        items = []
        for slide in generator.canvas.slides:
            image = html.escape(Path(generator.image_filename(slide.index)).name, quote=True)
            title = html.escape(slide.title, quote=True)
            items.append(f"<li><img src='{image}' alt='{title}' title='{title}'></li>")
        page = "<!DOCTYPE html>\n<html><body><ol>\n%s\n</ol></body></html>\n" % "\n".join(items)
        Path(f"{generator.base_name}.html").write_text(page, encoding=generator.encoding)


class HTMLGenerator:
    """
    Save every slide of *canvas* as ``<base_name><index>.<image_type>`` and
    pass it on to the sink.
    """

    image_type = "png"

    def __init__(
        self,
        canvas: Canvas,
        *,
        base_name: str,
        width: int,
        height: int,
        rasterizer: Rasterizer,
        sink: SlideSink = None,
        output_html: bool = True,
        encoding: str = "utf-8",
        logger: Logger = None,
    ):
        self.canvas = canvas
        self.base_name = base_name
        self.width = width
        self.height = height
        self.rasterizer = rasterizer
        self.sink = sink or FileSlideSink()
        self.output_html_enabled = output_html
        self.encoding = encoding
        self.logger = logger or StderrLogger()

        # label -> html id; sinks may fill it in to resolve links
        self.html_labels: Dict[str, str] = {}

        self.markdown_processor = create_markdown()
        for rule in ("heading_open", "paragraph_open"):
            self.markdown_processor.add_render_rule(rule, _render_font_open)
        for rule in ("heading_close", "paragraph_close"):
            self.markdown_processor.add_render_rule(rule, _render_font_close)

    @property
    def font_sizes(self) -> Dict[str, int]:
        return {
            "h1": self.height // 10,
            "h2": self.height // 14,
            "h3": self.height // 16,
            "p": self.height // 18,
        }

    def h(self, text) -> str:
        return html.escape(str(text), quote=True)

    def image_filename(self, index: int) -> str:
        return f"{self.base_name}{index}.{self.image_type}"

    def render_blocks(self, blocks: List[Block], font: bool = True) -> str:
        tokens = [token for block in blocks for token in block]
        env = {"font_sizes": self.font_sizes if font else {}, "html_labels": self.html_labels}
        return self.markdown_processor.renderer.render(tokens, self.markdown_processor.options, env)

    def slide_to_html(self, slide: Slide) -> str:
        return self.render_blocks(slide.blocks)

    def slide_document(self, slide: Slide) -> str:
        css = SLIDE_CSS % {
            "width": self.width,
            "height": self.height,
            "padding": self.width // 20,
        }
        return (
            "<!DOCTYPE html>\n<html><head><meta charset='utf-8'>"
            f"<title>{self.h(slide.title)}</title><style>{css}</style></head>"
            f"<body><div class='slide'>{self.slide_to_html(slide)}</div></body></html>\n"
        )

    def save(self) -> None:
        self.sink.prepare(self)
        if self.canvas.slides:
            asyncio.run(self._save_slides())
        if self.output_html_enabled:
            self.sink.output_html(self)

    async def _save_slides(self):
        await self.rasterizer.open()
        try:
            for slide in self.canvas.slides:
                await self.rasterizer.rasterize(slide, self.slide_document(slide), self.image_filename(slide.index))
                self.logger.debug(f"saved slide #{slide.index} as {self.image_filename(slide.index)}")
                self.save_html(slide, slide.index)
        finally:
            await self.rasterizer.close()

    def save_html(self, slide: Slide, index: int) -> None:
        self.sink.save_slide(self, slide, index)

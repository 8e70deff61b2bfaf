"""
Command entry point of the slide renderer.

``run`` takes the same argument vector as the command line. Embedders inject
behaviour through ``heading_handlers`` (parser) and ``sink`` (generator)
rather than by patching the renderer's classes.
"""
import argparse
from pathlib import Path
from typing import Iterable, Tuple

from .errors import UsageError
from .generator import HTMLGenerator, SlideSink
from .logger import LEVEL_NAMES, LOGGERS, create_logger
from .parser import HeadingHandler, SlideParser
from .rasterizer import RASTERIZERS
from .slide import Canvas
from .source import SOURCE_TYPES, create_source


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(f"{self.prog}: {message}")


def _parse_size(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTH,HEIGHT, got {value!r}") from None
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {value!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="rabbit", description="Render slide markup to images and HTML.")
    p.add_argument("-s", "--save-as-image", action="store_true",
                   help="Save every slide as an image without opening a window")
    p.add_argument("-S", "--size", type=_parse_size, default=(800, 600), metavar="WIDTH,HEIGHT",
                   help="Slide image size in pixels")
    p.add_argument("-b", "--base-name", default="slide",
                   help="Base path of generated files; the slide number is appended")
    p.add_argument("--output-html", action="store_true", help="Also produce HTML for the slides")
    p.add_argument("--logger", choices=sorted(LOGGERS), default="stderr", help="Where log messages go")
    p.add_argument("--log-level", choices=list(LEVEL_NAMES), default="info")
    p.add_argument("-e", "--encoding", default="utf-8", help="Source character encoding")
    p.add_argument("--rasterizer", choices=sorted(RASTERIZERS), default="browser",
                   help="How slide images are produced")
    p.add_argument("-T", "--type", dest="source_type", choices=sorted(SOURCE_TYPES), default="file",
                   help="Kind of the source argument")
    p.add_argument("source", nargs="?", help="Source file, or markup text with -T stringobject")
    return p


def run(*args: str, heading_handlers: Iterable[HeadingHandler] = (), sink: SlideSink = None) -> Canvas:
    """Run the renderer with command-line style *args*; return the parsed canvas."""
    options = build_parser().parse_args(list(args))
    logger = create_logger(options.logger, options.log_level)

    if not options.save_as_image:
        raise UsageError("interactive display is not supported; pass --save-as-image")
    if options.source is None:
        raise UsageError(f"no slide source given for type '{options.source_type}'")

    source = create_source(options.source_type, options.source, encoding=options.encoding)
    text = source.read()

    canvas = SlideParser(heading_handlers=heading_handlers, logger=logger).parse(text)
    width, height = options.size

    Path(options.base_name).parent.mkdir(parents=True, exist_ok=True)
    rasterizer = RASTERIZERS[options.rasterizer](width, height)
    generator = HTMLGenerator(
        canvas,
        base_name=options.base_name,
        width=width,
        height=height,
        rasterizer=rasterizer,
        sink=sink,
        output_html=options.output_html,
        encoding=source.encoding,
        logger=logger,
    )
    logger.info(f"rendering {len(canvas.slides)} slides at {width}x{height}")
    generator.save()
    return canvas

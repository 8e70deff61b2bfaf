#!/usr/bin/env python3
"""
Converter turning ``.rab`` slide markup into a container of slide images,
slide-deck HTML and per-slide HTML.
"""

import hashlib
import logging
import re
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional

from .config import RABBIT_DIR, RenderConfig, renderer_log_level
from .container import RenderResult, encode
from .errors import DirectoryCreationError
from .invocation import InvocationResult, run_isolated
from .templates import SlideTemplate

logger = logging.getLogger(__name__)

_RAB_EXT = re.compile(r"\.rab", re.IGNORECASE)


class RabbitConverter:
    """
    Convert slide markup for a site build.

    Results are cached per content digest for the lifetime of the converter;
    converting the same markup twice renders it once. Generated image paths
    are added to the site's ``keep_files`` so a later cleanup leaves them.
    """

    def __init__(self, site_config: MutableMapping[str, Any], *, invoke: Callable[..., InvocationResult] = run_isolated):
        """Create a converter.

        Parameters
        ----------
        site_config
            Host site configuration: ``destination`` (output base directory),
            ``keep_files`` (list shared with the host cleanup) and an optional
            ``rabbit`` mapping with ``width``, ``height``, ``template`` and
            ``rasterizer``.
        invoke
            Callable running one isolated render; replaced in tests.
        """
        self.site_config = site_config
        self.config = RenderConfig.from_site_config(site_config)
        self.site_config.setdefault("keep_files", [])
        self._invoke = invoke

        self._lock = threading.Lock()
        self._converted: Dict[str, str] = {}
        self._in_flight: Dict[str, Future] = {}

    def matches(self, ext: str) -> bool:
        return bool(_RAB_EXT.fullmatch(ext))

    def output_ext(self, ext: str) -> str:
        return ".html"

    @staticmethod
    def digest(content: str, encoding: str = "utf-8") -> str:
        return hashlib.md5(content.encode(encoding)).hexdigest()

    def convert(self, content: str, encoding: str = "utf-8") -> str:
        """Render *content* and return its container string."""
        content = content.strip()
        digest = self.digest(content, encoding)

        with self._lock:
            cached = self._converted.get(digest)
            if cached is not None:
                logger.debug(f"Using cached slides for {digest}")
                return cached
            pending = self._in_flight.get(digest)
            owner = pending is None
            if owner:
                pending = self._in_flight[digest] = Future()

        if not owner:
            logger.debug(f"Waiting for in-flight render of {digest}")
            return pending.result()

        try:
            converted = self._render(content, digest, encoding)
        except BaseException as exc:
            pending.set_exception(exc)
            raise
        else:
            pending.set_result(converted)
            with self._lock:
                self._converted[digest] = converted
            return converted
        finally:
            with self._lock:
                self._in_flight.pop(digest, None)

    def _render(self, content: str, digest: str, encoding: str) -> str:
        output_base = self.config.output_base
        image_basedir = self.config.image_root / digest
        image_filename_base = image_basedir / "slide"

        # keep the generated images from the host's cleanup pass
        for pattern in (f"{RABBIT_DIR}$", f"{RABBIT_DIR}/{digest}$"):
            self.add_keep_file(pattern)

        if not image_basedir.exists():
            try:
                image_basedir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DirectoryCreationError(image_basedir, exc) from exc
            logger.debug(f"Created slide image directory {str(image_basedir)!r}")

        log_level = renderer_log_level(logging.getLogger("rabbit_convertor").getEffectiveLevel())
        result = self._invoke(
            content,
            width=self.config.width,
            height=self.config.height,
            base_name=str(image_filename_base),
            log_level=log_level,
            encoding=encoding,
            rasterizer=self.config.rasterizer,
        )
        logger.debug(f"Generated html text {result.text!r}")

        title: Optional[str] = None
        title_image: Optional[str] = None
        images: List[tuple] = []
        for slide in result.slides:
            relative = self._relative_to_output(slide.image_path, output_base)
            logger.debug(f"Image generated #{slide.index} {slide.title} as {relative}")

            image_url = f"/{relative}"
            images.append((slide.index, slide.title, image_url, slide.width, slide.height))
            if slide.index == 0:
                title = slide.title
                title_image = image_url

            self.add_keep_file(relative)

        html = SlideTemplate(self.config.template).render(digest, images)
        logger.info(f"🐰 Converted {len(images)} slides ({digest})")

        return encode(RenderResult(
            digest=digest,
            title=title,
            image=title_image,
            width=self.config.width,
            height=self.config.height,
            slide_html=html,
            text=result.text,
        ))

    @staticmethod
    def _relative_to_output(path: str, output_base: Path) -> str:
        prefix = f"{output_base.as_posix().rstrip('/')}/"
        path = Path(path).as_posix()
        return path[len(prefix):] if path.startswith(prefix) else path

    def add_keep_file(self, pattern: str) -> None:
        with self._lock:
            keep_files = self.site_config["keep_files"]
            if pattern not in keep_files:
                keep_files.append(pattern)


def main():
    """Command-line entry point: convert one ``.rab`` file into a site directory."""
    import argparse
    import sys

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="rabbit-convert", description="Convert a .rab slide document to HTML and slide images.")
        p.add_argument("source", type=Path, help=".rab file to convert")
        p.add_argument("--destination", "-d", type=Path, default=Path("_site"), help="Site output directory")
        p.add_argument("--width", type=int, help="Slide image width (default 640)")
        p.add_argument("--height", type=int, help="Slide image height (default 480)")
        p.add_argument("--template", help="Slide deck template name")
        p.add_argument("--rasterizer", help="Slide image rasterizer (browser, draft)")
        p.add_argument("--encoding", default="utf-8", help="Source file encoding")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging")
        return p

    args = _build_parser().parse_args()

    if args.debug:
        # the package __init__ already configured the root logger
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("rabbit_convertor").setLevel(logging.DEBUG)

    rabbit_options = {
        key: value
        for key, value in (("width", args.width), ("height", args.height),
                           ("template", args.template), ("rasterizer", args.rasterizer))
        if value is not None
    }
    converter = RabbitConverter({
        "destination": str(args.destination),
        "keep_files": [],
        "rabbit": rabbit_options,
    })

    source: Path = args.source
    if not converter.matches(source.suffix):
        logger.error(f"'{source}' is not a .rab file")
        sys.exit(1)
    if not source.exists():
        logger.error(f"Slide source '{source}' not found")
        sys.exit(1)

    output = converter.convert(source.read_text(encoding=args.encoding), encoding=args.encoding)
    output_path = args.destination / f"{source.stem}{converter.output_ext(source.suffix)}"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding=args.encoding)
    logger.info("✅ Slides written to %s", output_path)


if __name__ == "__main__":
    main()

"""
Converter configuration.

The host site configuration is a mapping with at least ``destination`` and
``keep_files``; converter settings live under its ``rabbit`` key::

    rabbit:
      width: 640
      height: 480
      template: bootstrap_carousel.html.j2
      rasterizer: browser
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError
from .rabbit.rasterizer import RASTERIZERS

DEFAULT_SLIDE_HTML_TEMPLATE = "bootstrap_carousel.html.j2"
DEFAULT_SLIDE_IMAGE_WIDTH = 640
DEFAULT_SLIDE_IMAGE_HEIGHT = 480
DEFAULT_RASTERIZER = "browser"

RABBIT_DIR = "rabbit-image"

# Python logging level -> renderer log level name
LOG_LEVEL = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


def renderer_log_level(level: int) -> str:
    """Closest renderer level name for a Python logging level."""
    for threshold in sorted(LOG_LEVEL, reverse=True):
        if level >= threshold:
            return LOG_LEVEL[threshold]
    return "debug"


def _positive_int(value: Any, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"rabbit.{key} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"rabbit.{key} must be positive, got {number}")
    return number


@dataclass(frozen=True)
class RenderConfig:
    output_base: Path
    width: int = DEFAULT_SLIDE_IMAGE_WIDTH
    height: int = DEFAULT_SLIDE_IMAGE_HEIGHT
    template: str = DEFAULT_SLIDE_HTML_TEMPLATE
    rasterizer: str = DEFAULT_RASTERIZER

    @property
    def image_root(self) -> Path:
        return self.output_base / RABBIT_DIR

    @classmethod
    def from_site_config(cls, site_config: Mapping[str, Any]) -> "RenderConfig":
        destination = site_config.get("destination")
        if not destination:
            raise ConfigError("site configuration has no 'destination'")

        rabbit = site_config.get("rabbit") or {}
        rasterizer = rabbit.get("rasterizer") or DEFAULT_RASTERIZER
        if rasterizer not in RASTERIZERS:
            raise ConfigError(f"unknown rabbit.rasterizer '{rasterizer}'. Available: {sorted(RASTERIZERS)}")

        return cls(
            output_base=Path(destination),
            width=_positive_int(rabbit.get("width", DEFAULT_SLIDE_IMAGE_WIDTH), "width"),
            height=_positive_int(rabbit.get("height", DEFAULT_SLIDE_IMAGE_HEIGHT), "height"),
            template=rabbit.get("template") or DEFAULT_SLIDE_HTML_TEMPLATE,
            rasterizer=rasterizer,
        )

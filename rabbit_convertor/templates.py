"""Loader for the slide-deck HTML templates bundled with the package."""
from pathlib import Path
from typing import List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"

# (slide number, title, image url, width, height)
ImageEntry = Tuple[int, str, str, int, int]


def _validate_name(name: str) -> None:
    # Validate template name (security: prevent path traversal)
    stem = name.replace("_", "").replace("-", "").replace(".", "")
    if not stem.isalnum() or name.startswith(".") or ".." in name:
        raise ValueError(f"Invalid template name: {name}")


def list_available_templates() -> List[str]:
    if not TEMPLATE_DIR.exists():
        return []
    return sorted(f.name for f in TEMPLATE_DIR.glob("*.j2") if f.is_file())


class SlideTemplate:
    """
    A slide-deck template. Templates see ``digest`` and ``images``, a list of
    ``(number, title, url, width, height)`` tuples in slide order.
    """

    _env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        keep_trailing_newline=True,
    )

    def __init__(self, name: str):
        _validate_name(name)
        try:
            self._template = self._env.get_template(name)
        except TemplateNotFound:
            raise FileNotFoundError(
                f"Template '{name}' not found. Available templates: {list_available_templates()}"
            ) from None
        self.name = name

    def render(self, digest: str, images: Sequence[ImageEntry]) -> str:
        return self._template.render(digest=digest, images=list(images))

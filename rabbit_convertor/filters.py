"""
Template filters reading converted slide decks back out of page content.

Every filter returns its input unchanged when the input does not hold a
converted deck, so they are safe to apply to any page.
"""
from functools import wraps
from html import escape
from typing import Optional

from markupsafe import Markup

from .container import extract_html, extract_meta, extract_slide_html


def _xml_escape(value: Optional[str]) -> str:
    return escape(value or "", quote=True)


def slide_only(text: str) -> str:
    """The slide deck HTML of the first converted deck in *text*."""
    found = extract_html(text)
    if not found:
        return text

    inner = found[0]
    if not extract_meta(inner):
        return text

    slide = extract_slide_html(inner)
    if slide is None:
        return text
    return slide


def title_slide_link(text: str, url: str, include_text_link: bool = False) -> str:
    """The title slide image of the first converted deck, linked to *url*."""
    found = extract_html(text)
    if not found:
        return text

    meta = extract_meta(found[0])
    if not meta:
        return text

    escaped_url = _xml_escape(url)
    escaped_title = _xml_escape(meta.get("title"))

    html = (
        f"<a href='{escaped_url}'><img\n"
        f"  src='{_xml_escape(meta.get('image'))}'\n"
        f"  title='{escaped_title}'\n"
        f"  alt='{escaped_title}'\n"
        f"  width='{_xml_escape(meta.get('width'))}'\n"
        f"  height='{_xml_escape(meta.get('height'))}'></a>\n"
    )
    if include_text_link:
        html += f"<br />\n<a href='{escaped_url}'>{escaped_title}</a>\n"
    return html


def title_slide_with_text_link(text: str, url: str) -> str:
    return title_slide_link(text, url, include_text_link=True)


FILTERS = {
    "rabbit_slide": slide_only,
    "rabbit_title_slide": title_slide_link,
    "rabbit_title_slide_with_text_link": title_slide_with_text_link,
}


def _markup(func):
    @wraps(func)
    def wrapper(text, *args, **kwargs):
        result = func(text, *args, **kwargs)
        # pass-through input keeps whatever escaping it had
        return text if result is text else Markup(result)
    return wrapper


def register_filters(env):
    """
    Make the filters available to templates of a Jinja2 environment.

    Generated fragments are marked safe for autoescaping; input that is
    returned unchanged is left as it came in.
    """
    env.filters.update({name: _markup(func) for name, func in FILTERS.items()})
    return env

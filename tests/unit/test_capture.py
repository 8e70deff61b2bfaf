"""Test slide capture: per-slide HTML, commentary and image bookkeeping."""

import hashlib

import pytest

from rabbit_convertor.capture import CaptureSlideSink, capture_scope, current_capture, slide_label
from rabbit_convertor.comment import CommentExtension
from rabbit_convertor.errors import CaptureError
from rabbit_convertor.rabbit.generator import HTMLGenerator
from rabbit_convertor.rabbit.parser import SlideParser
from rabbit_convertor.rabbit.rasterizer import DraftRasterizer

DECK = """# Welcome

A *really* **short** talk about `x < y`.

## comment

Speaker intro.

# Agenda

- ~~old~~ new

## comment

See [the start](0), [the end](<Finale>) and [docs](http://example.com/).
Also [titled](1 "Agenda slide") and [classy](http://example.com/){.ext}.

# Finale

Thanks
"""


@pytest.fixture
def captured(tmp_path):
    canvas = SlideParser(heading_handlers=[CommentExtension()]).parse(DECK)
    generator = HTMLGenerator(
        canvas,
        base_name=str(tmp_path / "slide"),
        width=320,
        height=240,
        rasterizer=DraftRasterizer(320, 240),
        sink=CaptureSlideSink(),
    )
    with capture_scope() as storage:
        generator.save()
    return generator, storage


def digest():
    return hashlib.md5(DECK.encode("utf-8")).hexdigest()


def test_images_are_generated_and_recorded(captured, tmp_path):
    generator, storage = captured

    assert sorted(storage.images) == [0, 1, 2]
    for index, path in storage.images.items():
        assert path == str(tmp_path / f"slide{index}.png")
        assert (tmp_path / f"slide{index}.png").exists()
    assert storage.titles == {0: "Welcome", 1: "Agenda", 2: "Finale"}


def test_combined_html_is_not_written(captured, tmp_path):
    assert not (tmp_path / "slide.html").exists()
    assert not (tmp_path / "slide0.html").exists()


def test_slide_wrappers_carry_labels(captured):
    _, storage = captured

    assert len(storage.result) == 3
    for index, html in enumerate(storage.result):
        assert html.startswith(f"<div class='slide-and-comment' id='{slide_label(index, digest())}'>")
        assert html.endswith("</div>")
    assert storage.text == "".join(storage.result)


def test_font_wrappers_are_stripped_but_decorations_kept(captured):
    _, storage = captured
    title_html = storage.result[0]

    assert "<span" not in storage.text
    assert "</span>" not in storage.text
    assert "<h1>Welcome</h1>" in title_html
    assert "<em class='emphasis'>really</em>" in title_html
    assert "<strong class='keyword'>short</strong>" in title_html
    assert "<code class='code'>x &lt; y</code>" in title_html
    assert "<del>old</del>" in storage.result[1]


def test_slide_image_html_keeps_font_wrappers(captured):
    generator, _ = captured

    assert "<span style='font-size:" in generator.slide_document(generator.canvas.slides[2])


def test_comment_goes_into_comment_div(captured):
    generator, storage = captured
    title_html, agenda_html, finale_html = storage.result

    assert "<div class='slide-comment title-slide-comment'>" in title_html
    assert title_html.index("Speaker intro.") > title_html.index("title-slide-comment")

    assert "<div class='slide-comment'>" in agenda_html
    assert "title-slide-comment" not in agenda_html

    assert "slide-comment" not in finale_html

    # the slide body and the slide image never see the comment
    title_slide = generator.canvas.slides[0]
    assert "Speaker intro." not in generator.slide_to_html(title_slide)
    assert "Speaker intro." not in generator.slide_document(title_slide)
    assert storage.comments[0] == ["<p>Speaker intro.</p>\n"]
    assert storage.comments[2] == []


def test_references_resolve_to_slide_anchors(captured):
    _, storage = captured
    agenda_html = storage.result[1]

    assert f"<a href='#{slide_label(0, digest())}'>the start</a>" in agenda_html
    assert f"<a href='#{slide_label(2, digest())}'>the end</a>" in agenda_html
    assert "<a href='http://example.com/'>docs</a>" in agenda_html


def test_links_keep_their_other_attributes(captured):
    _, storage = captured
    agenda_html = storage.result[1]

    assert f"<a href='#{slide_label(1, digest())}' title='Agenda slide'>titled</a>" in agenda_html
    assert "<a href='http://example.com/' class='ext'>classy</a>" in agenda_html


def test_labels_cover_numbers_and_headings(captured):
    generator, _ = captured

    assert generator.html_labels["0"] == slide_label(0, digest())
    assert generator.html_labels["Agenda"] == slide_label(1, digest())
    assert generator.html_labels["Finale"] == slide_label(2, digest())


def test_capture_requires_active_scope():
    with pytest.raises(CaptureError):
        current_capture()


def test_capture_scope_is_fresh_and_restored():
    with capture_scope() as outer:
        outer.result.append("outer")
        with capture_scope() as inner:
            assert inner is not outer
            assert inner.result == []
            assert current_capture() is inner
        assert current_capture() is outer
    with pytest.raises(CaptureError):
        current_capture()

"""Test the converter: caching, keep files, container assembly."""

import logging
import threading
import time

import pytest

from rabbit_convertor.container import decode
from rabbit_convertor.converter import RabbitConverter
from rabbit_convertor.errors import ConfigError, DirectoryCreationError
from rabbit_convertor.filters import slide_only, title_slide_link
from rabbit_convertor.invocation import InvocationResult, SlideDescriptor

SOURCE = "# Hello\n\nworld\n\n## comment\n\nremark\n\n# Two\n\nmore\n"


class FakeInvoke:
    """Stands in for the isolated renderer and counts how often it runs."""

    def __init__(self, titles=("Title", "Next"), delay=0.0):
        self.calls = 0
        self.kwargs = None
        self.titles = titles
        self.delay = delay

    def __call__(self, text, **kwargs):
        self.calls += 1
        self.kwargs = kwargs
        time.sleep(self.delay)
        base_name = kwargs["base_name"]
        slides = [
            SlideDescriptor(index, title, f"{base_name}{index}.png", kwargs["width"], kwargs["height"])
            for index, title in enumerate(self.titles)
        ]
        return InvocationResult(slides=slides, text="<div>captured</div>")


@pytest.fixture
def site(tmp_path):
    return {"destination": str(tmp_path / "_site"), "keep_files": [".git"]}


def test_matches_and_output_ext(site):
    converter = RabbitConverter(site, invoke=FakeInvoke())

    assert converter.matches(".rab")
    assert converter.matches(".RAB")
    assert not converter.matches(".rabbit")
    assert not converter.matches(".md")
    assert converter.output_ext(".rab") == ".html"


def test_digest_is_stable():
    assert RabbitConverter.digest("abc") == "900150983cd24fb0d6963f7d28e17f72"


def test_convert_builds_container(site, tmp_path):
    fake = FakeInvoke()
    converter = RabbitConverter(site, invoke=fake)

    output = converter.convert(SOURCE)
    digest = RabbitConverter.digest(SOURCE.strip())

    [result] = decode(output)
    assert result.digest == digest
    assert result.title == "Title"
    assert result.image == f"/rabbit-image/{digest}/slide0.png"
    assert (result.width, result.height) == (640, 480)
    assert result.text == "<div>captured</div>"
    assert f'src="/rabbit-image/{digest}/slide1.png"' in result.slide_html
    assert f"rabbit-carousel-{digest}" in result.slide_html

    assert (tmp_path / "_site" / "rabbit-image" / digest).is_dir()
    assert fake.kwargs["base_name"] == str(tmp_path / "_site" / "rabbit-image" / digest / "slide")
    assert fake.kwargs["rasterizer"] == "browser"


def test_second_convert_is_cached(site):
    fake = FakeInvoke()
    converter = RabbitConverter(site, invoke=fake)

    first = converter.convert(SOURCE)
    second = converter.convert("\n\n" + SOURCE + "   \n")

    assert first == second
    assert fake.calls == 1


def test_keep_files(site):
    converter = RabbitConverter(site, invoke=FakeInvoke())
    digest = RabbitConverter.digest(SOURCE.strip())

    converter.convert(SOURCE)
    converter.convert(SOURCE)

    assert site["keep_files"] == [
        ".git",
        "rabbit-image$",
        f"rabbit-image/{digest}$",
        f"rabbit-image/{digest}/slide0.png",
        f"rabbit-image/{digest}/slide1.png",
    ]


def test_keep_files_not_duplicated_across_documents(site):
    converter = RabbitConverter(site, invoke=FakeInvoke())

    converter.convert("# One")
    converter.convert("# Two")

    assert site["keep_files"].count("rabbit-image$") == 1


def test_existing_directory_is_fine(site, tmp_path):
    digest = RabbitConverter.digest("# One")
    (tmp_path / "_site" / "rabbit-image" / digest).mkdir(parents=True)

    RabbitConverter(site, invoke=FakeInvoke()).convert("# One")


def test_no_slides(site):
    converter = RabbitConverter(site, invoke=FakeInvoke(titles=()))

    [result] = decode(converter.convert("nothing here"))

    assert result.title is None
    assert result.image is None


def test_render_failure_is_not_cached(site):
    calls = []

    def failing(text, **kwargs):
        calls.append(text)
        raise RuntimeError("render failed")

    converter = RabbitConverter(site, invoke=failing)

    with pytest.raises(RuntimeError, match="render failed"):
        converter.convert(SOURCE)
    with pytest.raises(RuntimeError, match="render failed"):
        converter.convert(SOURCE)

    assert len(calls) == 2


def test_retry_after_failure_renders(site):
    fake = FakeInvoke()
    state = {"fail": True}

    def flaky(text, **kwargs):
        if state.pop("fail", False):
            raise RuntimeError("first try")
        return fake(text, **kwargs)

    converter = RabbitConverter(site, invoke=flaky)
    with pytest.raises(RuntimeError):
        converter.convert(SOURCE)

    assert decode(converter.convert(SOURCE))[0].title == "Title"
    assert fake.calls == 1


def test_directory_creation_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    fake = FakeInvoke()
    converter = RabbitConverter({"destination": str(blocker), "keep_files": []}, invoke=fake)

    with pytest.raises(DirectoryCreationError):
        converter.convert(SOURCE)
    assert fake.calls == 0


def test_configuration(site):
    site["rabbit"] = {"width": 320, "height": "240", "template": "slide_list.html.j2", "rasterizer": "draft"}
    fake = FakeInvoke()

    output = RabbitConverter(site, invoke=fake).convert(SOURCE)

    assert (fake.kwargs["width"], fake.kwargs["height"]) == (320, 240)
    assert fake.kwargs["rasterizer"] == "draft"
    [result] = decode(output)
    assert (result.width, result.height) == (320, 240)
    assert "rabbit-slide-list" in result.slide_html


@pytest.mark.parametrize("site_config", [
    {"keep_files": []},
    {"destination": "_site", "rabbit": {"width": "wide"}},
    {"destination": "_site", "rabbit": {"height": -1}},
    {"destination": "_site", "rabbit": {"rasterizer": "crayon"}},
])
def test_invalid_configuration(site_config):
    with pytest.raises(ConfigError):
        RabbitConverter(site_config, invoke=FakeInvoke())


def test_unknown_template_is_not_cached(site):
    site["rabbit"] = {"template": "missing.html.j2"}
    fake = FakeInvoke()
    converter = RabbitConverter(site, invoke=fake)

    with pytest.raises(FileNotFoundError):
        converter.convert(SOURCE)
    with pytest.raises(FileNotFoundError):
        converter.convert(SOURCE)
    assert fake.calls == 2


def test_log_level_follows_package_logger(site):
    fake = FakeInvoke()
    package_logger = logging.getLogger("rabbit_convertor")
    previous = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    try:
        RabbitConverter(site, invoke=fake).convert(SOURCE)
    finally:
        package_logger.setLevel(previous)

    assert fake.kwargs["log_level"] == "debug"


def test_concurrent_same_document_renders_once(site):
    fake = FakeInvoke(delay=0.2)
    converter = RabbitConverter(site, invoke=fake)
    outputs = []

    threads = [threading.Thread(target=lambda: outputs.append(converter.convert(SOURCE))) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert fake.calls == 1
    assert len(outputs) == 3
    assert len(set(outputs)) == 1


def test_end_to_end_with_draft_images(site, tmp_path):
    site["rabbit"] = {"width": 320, "height": 240, "rasterizer": "draft"}
    converter = RabbitConverter(site)

    output = converter.convert(SOURCE)
    digest = RabbitConverter.digest(SOURCE.strip())
    image_dir = tmp_path / "_site" / "rabbit-image" / digest

    [result] = decode(output)
    assert result.title == "Hello"
    assert result.image == f"/rabbit-image/{digest}/slide0.png"
    assert (image_dir / "slide0.png").exists()
    assert (image_dir / "slide1.png").exists()
    assert not (image_dir / "slide.html").exists()

    assert "<div class='slide-comment title-slide-comment'>" in result.text
    assert "remark" in result.text
    assert f"id='slide-1-{digest}'" in result.text

    assert slide_only("<p>post</p>\n" + output) == result.slide_html
    link = title_slide_link(output, "/2024/talk.html")
    assert f"src='/rabbit-image/{digest}/slide0.png'" in link
    assert "width='320'" in link


def test_main_writes_page_and_enables_debug(tmp_path, monkeypatch):
    from rabbit_convertor.converter import main

    source = tmp_path / "talk.rab"
    source.write_text("# Talk\n\nhello\n", encoding="utf-8")
    destination = tmp_path / "_site"
    monkeypatch.setattr("sys.argv", [
        "rabbit-convert", str(source), "-d", str(destination),
        "--rasterizer", "draft", "--width", "160", "--height", "120", "--debug",
    ])

    root = logging.getLogger()
    package_logger = logging.getLogger("rabbit_convertor")
    previous = root.level, package_logger.level
    try:
        main()
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous[0])
        package_logger.setLevel(previous[1])

    [result] = decode((destination / "talk.html").read_text(encoding="utf-8"))
    assert result.title == "Talk"
    assert (result.width, result.height) == (160, 120)

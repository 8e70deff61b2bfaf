"""
Slide rasterizers: turn one slide's HTML document into an image file.
"""
from typing import Dict, Type

from PIL import Image, ImageDraw, ImageFont
from pyppeteer import launch

from .slide import Slide


class Rasterizer:
    """Base class. ``open``/``close`` bracket one deck."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def rasterize(self, slide: Slide, html: str, path: str) -> None:
        raise NotImplementedError


class BrowserRasterizer(Rasterizer):
    """Screenshot each slide in headless Chromium."""

    def __init__(self, width: int, height: int):
        super().__init__(width, height)
        self._browser = None

    async def open(self):
        # runs in the render worker thread: no signal handlers, no atexit hook
        self._browser = await launch(
            args=[
                '--allow-file-access-from-files',
                '--disable-web-security',
                '--allow-file-access'
            ],
            handleSIGINT=False,
            handleSIGTERM=False,
            handleSIGHUP=False,
            autoClose=False,
        )

    async def close(self):
        if self._browser is not None:
            await self._browser.close()
            self._browser = None

    async def rasterize(self, slide, html, path):
        page = await self._browser.newPage()
        try:
            await page.setViewport({'width': self.width, 'height': self.height})
            await page.setContent(html)
            await page.screenshot({
                'path': path,
                'clip': {'x': 0, 'y': 0, 'width': self.width, 'height': self.height},
            })
        finally:
            await page.close()


class DraftRasterizer(Rasterizer):
    """
    Browser-free preview: a blank canvas with the slide title and number.
    Useful for drafts and for environments without Chromium.
    """

    background = "white"
    foreground = "black"

    async def rasterize(self, slide, html, path):
        image = Image.new("RGB", (self.width, self.height), self.background)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()
        draw.text((self.width // 20, self.height // 3), slide.title, fill=self.foreground, font=font)
        draw.text((self.width // 20, self.height - self.height // 10), str(slide.index), fill=self.foreground, font=font)
        image.save(path, format="PNG")


RASTERIZERS: Dict[str, Type[Rasterizer]] = {
    "browser": BrowserRasterizer,
    "draft": DraftRasterizer,
}

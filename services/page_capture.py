"""Browser capture driver built on Playwright.

`PageCapture` launches Chromium once, navigates to the configured URL and waits
for the network to go idle. Each `capture()` call then writes a full-page PNG
under the screenshots directory and returns a `SnapshotArtifact`.

Example:
    async with PageCapture(url, screenshots_dir) as capture:
        snapshot = await capture.capture()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from models.artifacts import SnapshotArtifact
from models.errors import CaptureError
from utils.artifact_paths import artifact_path, ensure_directory, timestamp_slug


class PageCapture:
    """Capture full-page screenshots of a single live page.

    Args:
        url: Page to open once at startup.
        screenshots_dir: Directory receiving the PNG files (created if missing).
        prefix: Filename prefix for every snapshot.
        headless: Launch the browser without a window.
        executable_path: Optional Chromium binary to use instead of the bundled one.
        viewport: (width, height) of the browser viewport.
    """

    def __init__(
        self,
        url: str,
        screenshots_dir: Path | str,
        *,
        prefix: str = "screenshot",
        headless: bool = False,
        executable_path: Optional[str] = None,
        viewport: tuple[int, int] = (1080, 800),
    ) -> None:
        if not url:
            raise ValueError("A URL is required for page capture.")
        self.url = url
        self.screenshots_dir = Path(screenshots_dir)
        self.prefix = prefix
        self.headless = headless
        self.executable_path = executable_path
        self.viewport = viewport
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    @property
    def started(self) -> bool:
        return self._page is not None

    async def start(self) -> None:
        """Launch the browser and load the page, waiting for network idle.

        Safe to call more than once; only the first call launches.

        Raises:
            CaptureError: If the browser cannot be launched or the page cannot be loaded.
        """
        if self.started:
            return
        ensure_directory(self.screenshots_dir)
        try:
            self._playwright = await async_playwright().start()
            launch_args = {"headless": self.headless}
            if self.executable_path:
                launch_args["executable_path"] = self.executable_path
            self._browser = await self._playwright.chromium.launch(**launch_args)
            page = await self._browser.new_page(
                viewport={"width": self.viewport[0], "height": self.viewport[1]},
                java_script_enabled=True,
            )
            await page.goto(self.url, wait_until="networkidle")
        except Exception as exc:
            logging.error("Failed to open %s in the browser: %s", self.url, exc)
            await self.close()
            raise CaptureError(f"Failed to load {self.url}") from exc
        self._page = page
        logging.info("Browser ready on %s", self.url)

    async def capture(self) -> SnapshotArtifact:
        """Write a full-page screenshot and return its artifact.

        Raises:
            CaptureError: If the browser is not started or the screenshot fails.
        """
        if self._page is None:
            raise CaptureError("Page capture has not been started.")
        timestamp = timestamp_slug()
        path = artifact_path(self.screenshots_dir, self.prefix, "png", timestamp)
        try:
            await self._page.screenshot(path=str(path), full_page=True)
        except Exception as exc:
            logging.error("Screenshot of %s failed: %s", self.url, exc)
            raise CaptureError("Screenshot failed") from exc
        logging.info("Saved screenshot %s", path)
        return SnapshotArtifact(path=path, timestamp=timestamp)

    async def close(self) -> None:
        """Close the browser and stop Playwright; errors on shutdown are logged only."""
        browser, playwright = self._browser, self._playwright
        self._page = None
        self._browser = None
        self._playwright = None
        try:
            if browser is not None:
                await browser.close()
            if playwright is not None:
                await playwright.stop()
        except Exception as exc:
            logging.warning("Error while closing the browser: %s", exc)

    async def __aenter__(self) -> "PageCapture":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

"""
Rendered-table fetching for the Caución Rate Alert system.

The rate board is rendered client-side, so the page is loaded in headless
Chromium through Playwright and the resulting HTML is parsed with
BeautifulSoup.
"""

from typing import List

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..exceptions import FetchError
from ..interfaces import ITableFetcher
from ..models.config import ScraperConfig
from ..utils.logging import get_logger

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",  # containers ship a tiny /dev/shm
]


def extract_table_rows(html: str, table_selector: str = "table") -> List[List[str]]:
    """
    Extract the body rows of the rendered table as lists of cell text.

    Args:
        html: Rendered page HTML
        table_selector: CSS selector of the table element

    Returns:
        One list of stripped cell texts per ``tbody`` row, in document order
    """
    soup = BeautifulSoup(html, "html.parser")
    rows = []

    for row in soup.select(f"{table_selector} tbody tr"):
        cells = [cell.get_text(" ", strip=True) for cell in row.find_all("td")]
        rows.append(cells)

    return rows


class PlaywrightTableFetcher(ITableFetcher):
    """Loads a page in headless Chromium and returns its table rows."""

    def __init__(self, config: ScraperConfig):
        self.config = config
        self.logger = get_logger("rate.scraper", {"fetcher": "playwright"})

    async def fetch_rendered_table(self, url: str) -> List[List[str]]:
        html = await self.fetch_rendered_html(url)
        rows = extract_table_rows(html, self.config.table_selector)
        self.logger.info(
            "Extracted table rows", extra={"url": url, "row_count": len(rows)}
        )
        return rows

    async def fetch_rendered_html(self, url: str) -> str:
        """
        Navigate to ``url`` and return the HTML once the table has rendered.

        Raises:
            FetchError: If navigation or the table wait times out, or the
                browser fails to load the page
        """
        self.logger.info("Loading page", extra={"url": url})

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(
                    headless=self.config.headless, args=BROWSER_ARGS
                )
                try:
                    page = await browser.new_page()
                    await page.goto(
                        url,
                        wait_until="networkidle",
                        timeout=self.config.navigation_timeout_ms,
                    )
                    await page.wait_for_selector(
                        self.config.table_selector,
                        timeout=self.config.table_timeout_ms,
                    )
                    return await page.content()
                finally:
                    await browser.close()

        except PlaywrightTimeoutError as e:
            self.logger.error(
                "Timed out waiting for rate table", extra={"url": url, "error": str(e)}
            )
            raise FetchError(f"Timed out loading {url}: {e}", url=url) from e
        except PlaywrightError as e:
            self.logger.error(
                "Browser failed to load page", extra={"url": url, "error": str(e)}
            )
            raise FetchError(f"Failed to load {url}: {e}", url=url) from e

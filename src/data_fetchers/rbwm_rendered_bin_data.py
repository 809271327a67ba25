import logging
from typing import Optional
from playwright.sync_api import sync_playwright, TimeoutError as PlaywrightTimeoutError
from .base_fetcher import BinDataFetcher
from .rbwm_bin_data import DEFAULT_UPRN, BIN_COLLECTIONS_URL, HEADERS
from ..data_models import ScrapeResult, ScrapeFailure, PageContent
from ..extractor import extract_collections, page_content_from_rendered
from ..result_assembler import assemble_result

NAVIGATION_TIMEOUT_MS = 30000
RENDER_GRACE_PERIOD_MS = 4000
# --no-sandbox lets Chromium start inside restricted containers
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

ROW_CELLS_JS = "rows => rows.map(row => Array.from(row.querySelectorAll('td, th')).map(cell => cell.innerText.trim()))"
ELEMENT_TEXT_JS = "elements => elements.map(element => element.innerText.trim())"

logger = logging.getLogger(__name__)


class RbwmRenderedBinData(BinDataFetcher):
    """Renders the RBWM bin collection page in headless Chromium and scrapes the result."""

    def __init__(self, uprn: str = DEFAULT_UPRN):
        self.uprn = uprn
        self.target_url = BIN_COLLECTIONS_URL.format(uprn=uprn)

    def _render_page(self) -> Optional[PageContent]:
        """Returns the rendered page content, or None if navigation timed out."""
        with sync_playwright() as p:
            logger.info("Launching headless Chromium")
            browser = p.chromium.launch(headless=True, args=BROWSER_ARGS)
            try:
                page = browser.new_page(user_agent=HEADERS['User-Agent'], locale="en-GB")
                logger.info(f"Opening {self.target_url}")
                try:
                    page.goto(self.target_url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                except PlaywrightTimeoutError as e:
                    logger.error(f"Timed out loading {self.target_url}: {e}")
                    return None
                # Client-side rendering keeps going after the network settles
                page.wait_for_timeout(RENDER_GRACE_PERIOD_MS)
                body_text = page.inner_text("body")
                raw_rows = page.eval_on_selector_all("tr", ROW_CELLS_JS)
                element_texts = page.eval_on_selector_all("li, p, div", ELEMENT_TEXT_JS)
            finally:
                browser.close()
                logger.info("Browser closed")
        logger.info(f"Rendered page text length: {len(body_text)}, table rows: {len(raw_rows)}")
        logger.debug(f"Page text snippet: {body_text[:300]}")
        return page_content_from_rendered(body_text, raw_rows, element_texts)

    def get_collections(self) -> ScrapeResult:
        page = self._render_page()
        if page is None:
            return ScrapeFailure(error=f"Timed out loading {self.target_url}")
        return assemble_result(extract_collections(page), source=self.target_url, diagnostic=page.diagnostic)

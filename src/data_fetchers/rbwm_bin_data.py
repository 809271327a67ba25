import json
import logging
import requests
from dataclasses import dataclass
from typing import Optional, List
from urllib.parse import quote
from .base_fetcher import BinDataFetcher
from ..data_models import ScrapeResult, ScrapeFailure
from ..extractor import extract_collections, page_content_from_html
from ..result_assembler import assemble_result

# --- Configuration ---
DEFAULT_UPRN = "100080360324"
BASE_URL = "https://forms.rbwm.gov.uk"
BIN_COLLECTIONS_URL = f"{BASE_URL}/bincollections?uprn={{uprn}}"
PROXY_URL = "https://api.allorigins.win/get?url={url}"
REQUEST_TIMEOUT = 15
HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,*/*',
    'Accept-Language': 'en-GB,en;q=0.9',
}
ALL_ATTEMPTS_FAILED = "All fetch attempts failed"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchCandidate:
    url: str
    proxied: bool = False


def unwrap_proxy_envelope(body: str) -> str:
    """Returns the 'contents' of a JSON proxy envelope, or the body itself if it isn't one."""
    try:
        envelope = json.loads(body)
    except ValueError as e:
        logger.warning(f"Proxy response is not JSON, using raw body: {e}")
        return body
    if not isinstance(envelope, dict) or not isinstance(envelope.get('contents'), str) or not envelope['contents']:
        logger.warning("Proxy envelope has no HTML contents, using raw body")
        return body
    return envelope['contents']


class RbwmBinData(BinDataFetcher):
    """Fetches the RBWM bin collection page directly, falling back to a relay proxy."""

    def __init__(self, uprn: str = DEFAULT_UPRN):
        self.uprn = uprn
        self.target_url = BIN_COLLECTIONS_URL.format(uprn=uprn)

    def candidates(self) -> List[FetchCandidate]:
        return [
            FetchCandidate(self.target_url),
            FetchCandidate(PROXY_URL.format(url=quote(self.target_url, safe='')), proxied=True),
        ]

    def _fetch_html(self, candidate: FetchCandidate) -> str:
        logger.info(f"Fetching {candidate.url}")
        response = requests.get(candidate.url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
        if response.status_code >= 400:
            logger.warning(f"{candidate.url} responded with HTTP {response.status_code}")
        html = response.text
        if candidate.proxied:
            html = unwrap_proxy_envelope(html)
        logger.info(f"Got HTML, length: {len(html)}")
        logger.debug(f"HTML snippet: {html[:300]}")
        return html

    def get_collections(self) -> ScrapeResult:
        last_failure: Optional[ScrapeFailure] = None
        for candidate in self.candidates():
            try:
                html = self._fetch_html(candidate)
            except requests.RequestException as e:
                logger.error(f"Error fetching {candidate.url}: {e}", exc_info=True)
                continue
            page = page_content_from_html(html)
            result = assemble_result(extract_collections(page), source=candidate.url, diagnostic=page.diagnostic)
            if result.success:
                return result
            last_failure = result
        if last_failure is not None:
            return last_failure
        return ScrapeFailure(error=ALL_ATTEMPTS_FAILED)

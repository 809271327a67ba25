import logging
import re
from datetime import date
from typing import Optional, List, Callable, Iterable, Sequence
from bs4 import BeautifulSoup
from .data_models import CollectionEntry, PageContent
from .normaliser import normalise_bin_type

logger = logging.getLogger(__name__)

MONTHS = "January|February|March|April|May|June|July|August|September|October|November|December"
DATE_PATTERN = re.compile(rf"\d{{1,2}}\s+(?:{MONTHS})\s+\d{{4}}", re.IGNORECASE)
DATE_PARTS_PATTERN = re.compile(rf"(\d{{1,2}}) ({MONTHS}) (\d{{4}})", re.IGNORECASE)
MONTH_NUMBERS = {name.lower(): number for number, name in enumerate(MONTHS.split("|"), start=1)}
# Loose match used to pick the bin type cell out of a table row
BIN_TYPE_CELL_PATTERN = re.compile(r"general|refuse|recycl|garden|food|waste", re.IGNORECASE)
# Stricter phrase match for free text, where "waste" alone is too noisy
BIN_TYPE_PHRASE_PATTERN = re.compile(r"general waste|refuse|recycling|garden waste|food waste", re.IGNORECASE)

MAX_FREE_TEXT_LENGTH = 200
SNIPPET_LENGTH = 1000
DIAGNOSTIC_SAMPLE_SIZE = 20


def try_parse_date(text: str) -> Optional[date]:
    """
    Parses '7 May 2024' style text. Returns None for anything that isn't a real date.

    Month names are looked up in MONTH_NUMBERS rather than through strptime's
    %B, which follows the process LC_TIME locale.
    """
    normalised = " ".join(text.split())
    match = DATE_PARTS_PATTERN.fullmatch(normalised)
    if match:
        day, month_name, year = match.groups()
        try:
            return date(int(year), MONTH_NUMBERS[month_name.lower()], int(day))
        except ValueError:
            pass
    logger.debug(f"Discarding unparseable date '{normalised}'")
    return None


def _make_entry(date_text: str, type_text: str) -> Optional[CollectionEntry]:
    collection_date = try_parse_date(date_text)
    if collection_date is None:
        return None
    return CollectionEntry(date=collection_date, bin_type=normalise_bin_type(type_text))


def scan_table_rows(page: PageContent) -> List[CollectionEntry]:
    """Pairs the first date cell with the first bin type cell of each row."""
    entries = []
    for cells in page.rows:
        date_cell = next((cell for cell in cells if DATE_PATTERN.search(cell)), None)
        type_cell = next((cell for cell in cells if BIN_TYPE_CELL_PATTERN.search(cell)), None)
        if not (date_cell and type_cell):
            continue
        entry = _make_entry(DATE_PATTERN.search(date_cell).group(0), type_cell)
        if entry:
            entries.append(entry)
    return entries


def scan_text_spans(page: PageContent) -> List[CollectionEntry]:
    """Looks for a date and a bin type phrase inside the same piece of text."""
    entries = []
    for text in page.text_spans:
        date_match = DATE_PATTERN.search(text)
        type_match = BIN_TYPE_PHRASE_PATTERN.search(text)
        if not (date_match and type_match):
            continue
        entry = _make_entry(date_match.group(0), type_match.group(0))
        if entry:
            entries.append(entry)
    return entries


ExtractionPass = Callable[[PageContent], List[CollectionEntry]]

# Most structured first; the first pass to find anything wins
EXTRACTION_PASSES: List[ExtractionPass] = [scan_table_rows, scan_text_spans]


def extract_collections(page: PageContent, passes: Sequence[ExtractionPass] = EXTRACTION_PASSES) -> List[CollectionEntry]:
    """
    Runs the extraction passes in order and returns the first non-empty result.

    Args:
        page: Rows and text spans taken from the schedule page.
        passes: Extraction passes to try, in priority order.

    Returns:
        The raw (possibly duplicated, unsorted) entries, or an empty list
        when no pass found anything.
    """
    for extraction_pass in passes:
        entries = extraction_pass(page)
        if entries:
            logger.info(f"{extraction_pass.__name__} found {len(entries)} collection entries")
            return entries
    logger.warning("No collection entries found in page content")
    return []


def page_content_from_html(html: str) -> PageContent:
    """Builds PageContent from raw markup, keeping only short element texts as free text."""
    soup = BeautifulSoup(html, 'html.parser')
    rows = [
        [cell.get_text(" ", strip=True) for cell in row.find_all(['td', 'th'])]
        for row in soup.find_all('tr')
    ]
    text_spans = []
    for element in soup.find_all(True):
        text = element.get_text(" ", strip=True)
        if text and len(text) < MAX_FREE_TEXT_LENGTH:
            text_spans.append(text)
    diagnostic = {"htmlLength": len(html), "snippet": html[:SNIPPET_LENGTH]}
    return PageContent(rows=rows, text_spans=text_spans, diagnostic=diagnostic)


def page_content_from_rendered(body_text: str, raw_rows: Iterable[Iterable[str]], element_texts: Iterable[str]) -> PageContent:
    """
    Builds PageContent from what a browser render exposes.

    Rows keep their non-empty cells and are dropped below two cells. Element
    texts are kept whole, whatever their length, when they contain a date.
    """
    rows = []
    for raw_row in raw_rows:
        cells = [cell.strip() for cell in raw_row if cell and cell.strip()]
        if len(cells) >= 2:
            rows.append(cells)
    text_spans = [text.strip() for text in element_texts if text and DATE_PATTERN.search(text)]
    diagnostic = {
        "textLength": len(body_text),
        "snippet": body_text[:SNIPPET_LENGTH],
        "rows": rows[:DIAGNOSTIC_SAMPLE_SIZE],
        "dateTexts": text_spans[:DIAGNOSTIC_SAMPLE_SIZE],
    }
    return PageContent(rows=rows, text_spans=text_spans, diagnostic=diagnostic)

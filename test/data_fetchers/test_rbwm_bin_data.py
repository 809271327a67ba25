import pytest
import requests
import os
import sys
import json
from datetime import date
from unittest.mock import MagicMock
from urllib.parse import quote

# Update sys.path to include the project root
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, project_root)

from src.data_fetchers.rbwm_bin_data import (
    RbwmBinData, unwrap_proxy_envelope, DEFAULT_UPRN, PROXY_URL, REQUEST_TIMEOUT, HEADERS, ALL_ATTEMPTS_FAILED,
)
from src.data_models import CollectionEntry, BinType, BinCategory, ScrapeSuccess, ScrapeFailure

DIRECT_URL = f"https://forms.rbwm.gov.uk/bincollections?uprn={DEFAULT_UPRN}"
PROXIED_URL = PROXY_URL.format(url=quote(DIRECT_URL, safe=''))

# --- Mock HTML/JSON Data ---
MOCK_SCHEDULE_HTML = """<html><body><table>
<tr><th>Collection</th><th>Date</th></tr>
<tr><td>Refuse</td><td>Tuesday 14 May 2024</td></tr>
<tr><td>Recycling</td><td>Tuesday 7 May 2024</td></tr>
<tr><td>Refuse</td><td>Tuesday 14 May 2024</td></tr>
</table></body></html>"""
MOCK_BLOCKED_HTML = "<html><body><p>Access denied</p></body></html>"
EXPECTED_COLLECTIONS = (
    CollectionEntry(date(2024, 5, 7), BinType.of(BinCategory.RECYCLING)),
    CollectionEntry(date(2024, 5, 14), BinType.of(BinCategory.GENERAL_WASTE)),
)


def create_mock_response(text, status_code=200, url="http://mock.url"):
    """Creates a mock requests.Response object."""
    mock_resp = MagicMock(spec=requests.Response); mock_resp.text = text; mock_resp.status_code = status_code; mock_resp.url = url; return mock_resp


@pytest.fixture
def mock_get(mocker):
    return mocker.patch('src.data_fetchers.rbwm_bin_data.requests.get')


def test_candidates_direct_then_proxy():
    candidates = RbwmBinData().candidates()
    assert [c.url for c in candidates] == [DIRECT_URL, PROXIED_URL]
    assert [c.proxied for c in candidates] == [False, True]


def test_direct_fetch_success(mock_get, mocker):
    mock_get.return_value = create_mock_response(MOCK_SCHEDULE_HTML)
    result = RbwmBinData().get_collections()
    assert result == ScrapeSuccess(collections=EXPECTED_COLLECTIONS, source=DIRECT_URL)
    mock_get.assert_called_once_with(DIRECT_URL, headers=HEADERS, timeout=REQUEST_TIMEOUT)
    assert HEADERS['Accept-Language'].startswith('en-GB')


def test_falls_back_to_proxy_envelope(mock_get):
    envelope = json.dumps({"contents": MOCK_SCHEDULE_HTML, "status": {"http_code": 200}})
    mock_get.side_effect = [create_mock_response(MOCK_BLOCKED_HTML, 403), create_mock_response(envelope)]
    result = RbwmBinData().get_collections()
    assert result == ScrapeSuccess(collections=EXPECTED_COLLECTIONS, source=PROXIED_URL)
    assert mock_get.call_count == 2


def test_network_error_skips_to_proxy_with_raw_body(mock_get):
    mock_get.side_effect = [requests.exceptions.ConnectionError("refused"), create_mock_response(MOCK_SCHEDULE_HTML)]
    result = RbwmBinData().get_collections()
    assert result.success
    assert result.source == PROXIED_URL


def test_all_attempts_error(mock_get):
    mock_get.side_effect = [requests.exceptions.ConnectionError("refused"), requests.exceptions.Timeout("slow")]
    result = RbwmBinData().get_collections()
    assert result == ScrapeFailure(error=ALL_ATTEMPTS_FAILED)
    assert result.to_dict() == {"success": False, "error": ALL_ATTEMPTS_FAILED}


def test_no_data_anywhere_reports_last_response(mock_get):
    proxied_page = "<html><body><p>Proxy says hello</p></body></html>"
    mock_get.side_effect = [create_mock_response(MOCK_BLOCKED_HTML), create_mock_response(json.dumps({"contents": proxied_page}))]
    result = RbwmBinData().get_collections()
    assert isinstance(result, ScrapeFailure)
    assert result.diagnostic == {"htmlLength": len(proxied_page), "snippet": proxied_page}


def test_no_data_then_proxy_timeout_reports_direct_response(mock_get):
    mock_get.side_effect = [create_mock_response(MOCK_BLOCKED_HTML), requests.exceptions.Timeout("slow")]
    result = RbwmBinData().get_collections()
    assert isinstance(result, ScrapeFailure)
    assert result.diagnostic["htmlLength"] == len(MOCK_BLOCKED_HTML)


def test_custom_uprn_in_url(mock_get):
    mock_get.return_value = create_mock_response(MOCK_SCHEDULE_HTML)
    fetcher = RbwmBinData(uprn="123")
    fetcher.get_collections()
    mock_get.assert_called_once_with("https://forms.rbwm.gov.uk/bincollections?uprn=123", headers=HEADERS, timeout=REQUEST_TIMEOUT)


@pytest.mark.parametrize("body", ["<html>not json</html>", json.dumps(["a", "list"]), json.dumps({"contents": None}), json.dumps({"contents": {"a": 1}}), ""])
def test_unwrap_proxy_envelope_falls_back_to_body(body):
    assert unwrap_proxy_envelope(body) == body


def test_unwrap_proxy_envelope_contents():
    assert unwrap_proxy_envelope(json.dumps({"contents": "<p>hi</p>"})) == "<p>hi</p>"


def test_non_string_envelope_contents_is_failure_not_error(mock_get):
    envelope = json.dumps({"contents": {"a": 1}})
    mock_get.side_effect = [create_mock_response("<p>x</p>"), create_mock_response(envelope)]
    result = RbwmBinData().get_collections()
    assert isinstance(result, ScrapeFailure)
    assert result.diagnostic["htmlLength"] == len(envelope)

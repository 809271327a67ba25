import pytest
import os
import sys

# Add project root to sys.path to allow importing src modules
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, project_root)

# Imports from the modules being tested or used in tests
from src.data_fetchers.fetcher_factory import create_fetcher
from src.data_fetchers.rbwm_bin_data import RbwmBinData
from src.data_fetchers.rbwm_rendered_bin_data import RbwmRenderedBinData
from src.data_fetchers.cached_data_fetcher import CachedBinData
from src.result_cache import ResultCache


def test_create_rbwm_fetcher_no_cache():
    """Test creating the direct/proxy fetcher without caching."""
    fetcher = create_fetcher(source="rbwm", use_cache=False)
    assert isinstance(fetcher, RbwmBinData)
    assert not isinstance(fetcher, CachedBinData)

def test_create_rendered_fetcher_no_cache():
    fetcher = create_fetcher(source="rbwm_rendered", use_cache=False)
    assert isinstance(fetcher, RbwmRenderedBinData)

def test_create_fetcher_with_cache():
    """Test creating a fetcher wrapped in the caching layer."""
    fetcher = create_fetcher(source="rbwm_rendered", use_cache=True)
    assert isinstance(fetcher, CachedBinData)
    assert isinstance(fetcher._fetcher, RbwmRenderedBinData)
    assert isinstance(fetcher.cache, ResultCache)

def test_create_fetcher_uses_given_cache():
    cache = ResultCache()
    fetcher = create_fetcher(source="rbwm", use_cache=True, cache=cache)
    assert fetcher.cache is cache

def test_create_fetcher_case_insensitive():
    assert isinstance(create_fetcher(source="RBWM", use_cache=False), RbwmBinData)
    assert isinstance(create_fetcher(source="Rbwm_Rendered", use_cache=False), RbwmRenderedBinData)

def test_separate_fetchers_get_separate_caches():
    first = create_fetcher(source="rbwm", use_cache=True)
    second = create_fetcher(source="rbwm", use_cache=True)
    assert first.cache is not second.cache

def test_create_unknown_source_raises_error():
    """Test that requesting an unknown source raises ValueError."""
    with pytest.raises(ValueError, match="Unknown data source: unknown_council"):
        create_fetcher(source="unknown_council", use_cache=False)

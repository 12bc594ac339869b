"""Tests for src/domain/caching.py."""

from datetime import timedelta

import pytest

from src.domain.caching import Cache, CacheEntryOptions


def test_cache_is_abstract():
    with pytest.raises(TypeError):
        Cache()  # type: ignore[abstract]


def test_entry_options_defaults():
    options = CacheEntryOptions()
    assert options.expiration == timedelta(minutes=5)
    assert options.local_expiration == timedelta(minutes=2)


def test_entry_options_reject_non_positive_expiration():
    with pytest.raises(ValueError):
        CacheEntryOptions(expiration=timedelta(0))


def test_entry_options_reject_non_positive_local_expiration():
    with pytest.raises(ValueError):
        CacheEntryOptions(local_expiration=timedelta(seconds=-1))


def test_effective_local_expiration_defaults_to_expiration():
    options = CacheEntryOptions(expiration=timedelta(seconds=30), local_expiration=None)
    assert options.effective_local_expiration == timedelta(seconds=30)


def test_effective_local_expiration_never_exceeds_expiration():
    options = CacheEntryOptions(
        expiration=timedelta(seconds=30), local_expiration=timedelta(minutes=10)
    )
    assert options.effective_local_expiration == timedelta(seconds=30)

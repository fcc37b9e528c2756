"""Tests for asset name to feed identifier mappings."""
import pytest

from invest_tracker.services.asset_mappings import (
    collect_crypto_ids,
    collect_stock_tickers,
    crypto_id_for,
    is_stock_category,
    ticker_for,
)


pytestmark = pytest.mark.unit


@pytest.mark.parametrize("name,coin_id", [
    ("btc", "bitcoin"),
    ("BTC", "bitcoin"),
    ("doge", "dogecoin"),
    ("trump", "maga"),
])
def test_crypto_id_for(name, coin_id):
    assert crypto_id_for(name) == coin_id


@pytest.mark.parametrize("name,ticker", [
    ("Tata Steel", "TATASTEEL.NS"),
    ("motilal-nasdaq 100", "MON100.NS"),
    ("Nippon India ETF Gold BeES", "GOLDBEES.NS"),
    ("mirae asset nyse fang+etf", "MAFANG.NS"),
])
def test_ticker_for(name, ticker):
    assert ticker_for(name) == ticker


def test_unmapped_names():
    assert crypto_id_for("shiba") is None
    assert ticker_for("reliance") is None


def test_stock_categories():
    assert is_stock_category("Stocks")
    assert is_stock_category("ETF Groww")
    assert not is_stock_category("Crypto")
    assert not is_stock_category("Money")


def test_collect_ids_distinct_in_first_seen_order(make_record):
    investments = [
        make_record(id=1, category="Crypto", name="eth"),
        make_record(id=2, category="Crypto", name="BTC"),
        make_record(id=3, category="Crypto", name="eth"),
        make_record(id=4, category="Crypto", name="shiba"),
        make_record(id=5, category="Stocks", name="btc"),
    ]
    assert collect_crypto_ids(investments) == ["ethereum", "bitcoin"]


def test_collect_tickers_only_stock_categories(make_record):
    investments = [
        make_record(id=1, category="ETF Groww", name="niftybees"),
        make_record(id=2, category="Stocks", name="pateleng"),
        make_record(id=3, category="Crypto", name="pateleng"),
        make_record(id=4, category="Stocks", name="Niftybees"),
        make_record(id=5, category="Money", name="tata steel"),
    ]
    assert collect_stock_tickers(investments) == ["NIFTYBEES.NS", "PATELENG.NS"]

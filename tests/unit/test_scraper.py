from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from cattle_tracker.config import Settings
from cattle_tracker.scraper import AcceptancePolicy, MarketScraper, extract_records, is_footer

EXPECTED_RECORDS = 3


def _row(*cells: str) -> str:
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


def _table(*rows: str) -> str:
    return "<table>" + "".join(rows) + "</table>"


def _scraper(settings: Settings, handler) -> MarketScraper:
    return MarketScraper(settings, transport=httpx.MockTransport(handler))


def test_fixture_listing_yields_only_valid_rows(listing_html: str) -> None:
    records = extract_records(listing_html)

    assert len(records) == EXPECTED_RECORDS
    assert [r.date for r in records] == ["2025-12-01", "2025-12-02", "2025-12-03"]
    first = records[0]
    assert first.head_count == 8032
    assert first.total_amount == pytest.approx(15234567.5)
    assert first.index == pytest.approx(2845.12)
    assert all(100 < r.index < 50_000 and 0 < r.head_count < 500_000 for r in records)


@pytest.mark.parametrize(
    "row",
    [
        _row("Totales 01/12/2025", "8.032", "1.000,00", "2.845,12"),
        _row("total 01/12/2025", "8.032", "1.000,00", "2.845,12"),
        _row("01/12/2019", "8.032", "1.000,00", "2.845,12"),
        _row("01/12/2025", "8.032", "1.000,00", "100"),
        _row("01/12/2025", "8.032", "1.000,00", "50.000"),
        _row("01/12/2025", "8.032", "1.000,00", "0"),
        _row("01/12/2025", "0", "1.000,00", "2.845,12"),
        _row("01/12/2025", "0,5", "1,00", "2.800"),
        _row("01/12/2025", "500.000", "1.000,00", "2.845,12"),
        _row("01/12/2025", "8.032", "2.845,12"),
    ],
)
def test_rows_failing_any_condition_are_rejected(row: str) -> None:
    assert extract_records(_table(row)) == []


def test_policy_bounds_are_configurable() -> None:
    html = _table(_row("01/12/2025", "12", "1.000,00", "80,5"))
    assert extract_records(html) == []

    relaxed = AcceptancePolicy(index_min=50, index_max=200)
    records = extract_records(html, relaxed)
    assert len(records) == 1
    assert records[0].index == pytest.approx(80.5)


def test_policy_from_settings(test_settings: Settings) -> None:
    settings = test_settings.model_copy(update={"index_min": 1, "head_count_max": 10})
    policy = AcceptancePolicy.from_settings(settings)
    assert policy.index_min == 1
    assert policy.head_count_max == 10


def test_is_footer_is_case_insensitive() -> None:
    assert is_footer("TOTAL")
    assert is_footer("Totales del mes")
    assert not is_footer("Ma 02/12/2025")


def test_build_url_only_filters_with_both_bounds(test_settings: Settings) -> None:
    scraper = MarketScraper(test_settings)

    assert scraper.build_url() == "https://market.test/listing"
    assert scraper.build_url(date(2025, 12, 1), None) == "https://market.test/listing"
    assert scraper.build_url(date(2025, 12, 1), "31/12/2025") == (
        "https://market.test/listing?txtFECHAINI=01/12/2025"
        "&txtFECHAFIN=31/12/2025&CP=&LISTADO=SI"
    )


def test_scrape_sends_iso_bounds_in_source_format(test_settings: Settings) -> None:
    params: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append((request.url.params["txtFECHAINI"], request.url.params["txtFECHAFIN"]))
        return httpx.Response(200, text="<table></table>")

    asyncio.run(_scraper(test_settings, handler).scrape("2025-12-01", "2025-12-31"))

    assert params == [("01/12/2025", "31/12/2025")]


def test_scrape_sends_user_agent_and_parses(test_settings: Settings, listing_html: str) -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["user_agent"] = request.headers["User-Agent"]
        return httpx.Response(200, text=listing_html)

    records = asyncio.run(_scraper(test_settings, handler).scrape())

    assert len(records) == EXPECTED_RECORDS
    assert seen["user_agent"] == test_settings.user_agent


@pytest.mark.parametrize(
    "failure",
    [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(404),
    ],
)
def test_scrape_returns_empty_on_error_status(test_settings: Settings, failure) -> None:
    assert asyncio.run(_scraper(test_settings, failure).scrape()) == []


@pytest.mark.parametrize("error", [httpx.ReadTimeout, httpx.ConnectError])
def test_scrape_returns_empty_on_network_failure(test_settings: Settings, error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error("unreachable", request=request)

    assert asyncio.run(_scraper(test_settings, handler).scrape()) == []


def test_scrape_month_requests_whole_leap_february(test_settings: Settings) -> None:
    params: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append((request.url.params["txtFECHAINI"], request.url.params["txtFECHAFIN"]))
        return httpx.Response(200, text="<table></table>")

    assert asyncio.run(_scraper(test_settings, handler).scrape_month(2024, 2)) == []
    assert params == [("01/02/2024", "29/02/2024")]


def test_scrape_months_merges_sorted_and_unique(test_settings: Settings) -> None:
    pages = {
        "01/11/2025": _table(
            _row("28/11/2025", "900", "1,00", "2.700"),
            _row("01/12/2025", "1.000", "1,00", "2.800"),
        ),
        "01/12/2025": _table(
            _row("02/12/2025", "1.100", "1,00", "2.900"),
            _row("01/12/2025", "1.200", "1,00", "2.850"),
        ),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=pages[request.url.params["txtFECHAINI"]])

    records = asyncio.run(
        _scraper(test_settings, handler).scrape_months([(2025, 11), (2025, 12)])
    )

    assert [r.date for r in records] == ["2025-11-28", "2025-12-01", "2025-12-02"]
    # The first occurrence of a duplicated day wins.
    assert records[1].head_count == 1000

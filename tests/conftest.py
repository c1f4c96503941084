"""Pytest configuration and shared fixtures."""

import asyncio
import math
import time
from typing import Dict, Iterable, List, Optional, Set
from xml.sax.saxutils import escape

import pytest

from kipris_insight.core.config import KiprisConfig
from kipris_insight.core.models import Page, RawPatentRecord, SearchQuery
from kipris_insight.tools.kipris_api import KiprisAPIError


@pytest.fixture
def config() -> KiprisConfig:
    """Offline settings: no .env, fixed key, fastest allowed pacing."""
    return KiprisConfig(
        _env_file=None,
        KIPRIS_API_KEY="test-key",
        KIPRIS_BASE_URL="http://kipris.test",
        BATCH_DELAY_SECONDS=0.2,
        RETRY_DELAY_MULTIPLIER=0.0,
    )


@pytest.fixture
def query() -> SearchQuery:
    return SearchQuery(
        applicant="삼성전자",
        date_range_start="20230101",
        date_range_end="20231231",
    )


def make_record(
    number: str = "1020230000001",
    date: str = "20230115",
    status: str = "등록",
    ipc_number: str = "G06F 17/30",
    title: Optional[str] = "테스트 발명",
    applicant: str = "삼성전자",
) -> RawPatentRecord:
    return RawPatentRecord(
        application_number=number,
        applicant_name=applicant,
        application_date=date,
        invention_title=title,
        classification_codes=ipc_number,
        registration_status=status,
    )


def item_xml(fields: Dict[str, str]) -> str:
    body = "".join(f"<{key}>{escape(value)}</{key}>" for key, value in fields.items())
    return f"<item>{body}</item>"


def build_envelope(
    items: Iterable[Dict[str, str]] = (),
    total_count: Optional[int] = None,
    page_no: Optional[int] = 1,
    num_of_rows: Optional[int] = 100,
    result_code: str = "00",
    include_items: bool = True,
) -> str:
    """Build a KIPRIS-style `<response>` document."""
    items = list(items)
    if total_count is None:
        total_count = len(items)

    count_parts = []
    if num_of_rows is not None:
        count_parts.append(f"<numOfRows>{num_of_rows}</numOfRows>")
    if page_no is not None:
        count_parts.append(f"<pageNo>{page_no}</pageNo>")
    if total_count is not None:
        count_parts.append(f"<totalCount>{total_count}</totalCount>")

    items_xml = ""
    if include_items:
        items_xml = "<items>" + "".join(item_xml(fields) for fields in items) + "</items>"

    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        "<response>"
        "<header><successYN>Y</successYN>"
        f"<resultCode>{result_code}</resultCode><resultMsg>NORMAL SERVICE.</resultMsg>"
        "</header>"
        f"<body>{items_xml}</body>"
        f"<count>{''.join(count_parts)}</count>"
        "</response>"
    )


class FakePageSource:
    """
    In-memory stand-in for `KiprisConnector.fetch_page`.

    Serves `total_count` synthetic records split into pages, records every
    call, and can fail or slow down chosen pages.
    """

    def __init__(
        self,
        total_count: int,
        fail_pages: Optional[Set[int]] = None,
        latency: Optional[Dict[int, float]] = None,
        error: Optional[Exception] = None,
        fail_limit: Optional[int] = None,
    ) -> None:
        self.total_count = total_count
        self.fail_pages = fail_pages or set()
        self.latency = latency or {}
        self.error = error
        self.fail_limit = fail_limit
        self.failures = 0
        self.calls: List[int] = []
        self.started_at: Dict[int, float] = {}
        self.finished_at: Dict[int, float] = {}
        self.cancelled: List[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def records_for(self, page_number: int, page_size: int) -> List[RawPatentRecord]:
        start = (page_number - 1) * page_size
        end = min(start + page_size, self.total_count)
        return [
            make_record(
                number=f"10202300{index:05d}",
                date=f"2023{(index % 12) + 1:02d}15",
            )
            for index in range(start, end)
        ]

    async def fetch_page(
        self, query: SearchQuery, page_number: int = 1, page_size: int = 100
    ) -> Page:
        self.calls.append(page_number)
        self.started_at[page_number] = time.monotonic()
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency.get(page_number, 0.01))
            if page_number in self.fail_pages and (
                self.fail_limit is None or self.failures < self.fail_limit
            ):
                self.failures += 1
                raise self.error or KiprisAPIError(f"page {page_number} failed")
            items = tuple(self.records_for(page_number, page_size))
        except asyncio.CancelledError:
            self.cancelled.append(page_number)
            raise
        finally:
            self.in_flight -= 1
            self.finished_at[page_number] = time.monotonic()
        return Page(
            items=items,
            total_count=self.total_count,
            page_size=page_size,
            page_number=page_number,
        )

    def expected_pages(self, page_size: int) -> int:
        return math.ceil(self.total_count / page_size)

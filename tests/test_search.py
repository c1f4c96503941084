"""Tests for the basic/advanced/detail search operations."""

import httpx
import pytest

from kipris_insight.core.status import RegistrationStatus
from kipris_insight.services.search import PatentSearchService
from kipris_insight.tools.kipris_api import KiprisAPIError, KiprisConnector, PatentNotFoundError

from conftest import build_envelope


def item(number: str, date: str = "20230101") -> dict:
    return {
        "applicationNumber": number,
        "applicantName": "네이버",
        "applicationDate": date,
        "ipcNumber": "G06F 16/00",
        "registerStatus": "공개",
    }


class RecordingHandler:
    """MockTransport handler serving a fixed total split into pages."""

    def __init__(self, total: int, status_code: int = 200) -> None:
        self.total = total
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="error")
        params = request.url.params
        if "applicationNumber" in params:
            number = params["applicationNumber"]
            items = [item(number)] if number.startswith("10") else []
            body = build_envelope(items, total_count=len(items))
        else:
            page_no = int(params["pageNo"])
            rows = int(params["numOfRows"])
            start = (page_no - 1) * rows
            end = min(start + rows, self.total)
            items = [item(f"10{i:011d}") for i in range(start, end)]
            body = build_envelope(items, total_count=self.total, page_no=page_no, num_of_rows=rows)
        return httpx.Response(200, content=body.encode("utf-8"))


def make_service(config, handler) -> PatentSearchService:
    connector = KiprisConnector(config=config, transport=httpx.MockTransport(handler))
    return PatentSearchService(connector=connector, config=config)


class TestBasicSearch:
    @pytest.mark.asyncio
    async def test_first_page_uses_search_page_size(self, config):
        handler = RecordingHandler(total=45)
        result = await make_service(config, handler).basic_search("네이버", "20230101", "20231231")

        assert handler.requests[0].url.params["numOfRows"] == "20"
        assert result.total == 45
        assert result.page == 1
        assert result.total_pages == 3
        assert len(result.patents) == 20

    @pytest.mark.asyncio
    async def test_requested_page(self, config):
        handler = RecordingHandler(total=45)
        result = await make_service(config, handler).basic_search(
            "네이버", "20230101", "20231231", page=3
        )
        assert result.page == 3
        assert len(result.patents) == 5

    @pytest.mark.asyncio
    async def test_empty_result(self, config):
        handler = RecordingHandler(total=0)
        result = await make_service(config, handler).basic_search("네이버", "20230101", "20231231")
        assert (result.total, result.total_pages, result.patents) == (0, 0, ())

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(self, config):
        handler = RecordingHandler(total=10, status_code=503)
        with pytest.raises(KiprisAPIError):
            await make_service(config, handler).basic_search("네이버", "20230101", "20231231")


class TestAdvancedSearch:
    @pytest.mark.asyncio
    async def test_status_label_becomes_lastvalue(self, config):
        handler = RecordingHandler(total=3)
        await make_service(config, handler).advanced_search(
            "네이버", "20230101", "20231231", invention_title="검색", registration_status="등록"
        )
        params = handler.requests[0].url.params
        assert params["lastvalue"] == "R"
        assert params["inventionTitle"] == "검색"

    @pytest.mark.asyncio
    async def test_enum_status_is_accepted(self, config):
        handler = RecordingHandler(total=3)
        await make_service(config, handler).advanced_search(
            "네이버", "20230101", "20231231", registration_status=RegistrationStatus.INVALIDATED
        )
        assert handler.requests[0].url.params["lastvalue"] == "I"

    @pytest.mark.asyncio
    async def test_unknown_status_applies_no_filter(self, config):
        handler = RecordingHandler(total=3)
        await make_service(config, handler).advanced_search(
            "네이버", "20230101", "20231231", invention_title="", registration_status="심사중"
        )
        params = handler.requests[0].url.params
        assert "lastvalue" not in params
        assert "inventionTitle" not in params


class TestSearchAll:
    @pytest.mark.asyncio
    async def test_collects_every_page(self, config):
        handler = RecordingHandler(total=230)
        records = await make_service(config, handler).search_all(
            "네이버", "20230101", "20231231", concurrency_limit=2
        )

        pages = sorted(int(r.url.params["pageNo"]) for r in handler.requests)
        assert pages == [1, 2, 3]
        assert all(r.url.params["numOfRows"] == "100" for r in handler.requests)
        assert len(records) == 230


class TestDetail:
    @pytest.mark.asyncio
    async def test_found(self, config):
        handler = RecordingHandler(total=0)
        record = await make_service(config, handler).get_detail("1020230000001")
        assert record.application_number == "1020230000001"

    @pytest.mark.asyncio
    async def test_not_found(self, config):
        handler = RecordingHandler(total=0)
        with pytest.raises(PatentNotFoundError):
            await make_service(config, handler).get_detail("2020230000001")

"""
KIPRIS Plus patent search API wrapper for KIPRIS Insight.

This module provides the `KiprisConnector` class, which issues single
paginated requests against the KIPRIS advanced search endpoint and normalizes
the XML envelope into typed `Page` objects.

Normalization rules applied at this boundary:
- `body/items/item` is always exposed as an ordered tuple, whether the
  response carried zero, one or many `item` elements.
- Missing `count` fields fall back to 0 / requested page size / requested
  page number.
- Gateway error envelopes, non-success result codes and malformed numbers
  raise `KiprisAPIError` instead of producing partial data.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from xml.etree import ElementTree as ET

import httpx

from kipris_insight.core.config import KiprisConfig, get_config
from kipris_insight.core.models import Page, RawPatentRecord, SearchQuery

logger = logging.getLogger("KiprisConnector")

SUCCESS_RESULT_CODES = {"00", "0"}


class KiprisAPIError(Exception):
    """Raised when a KIPRIS API call fails or returns invalid data."""


class KiprisRateLimitError(KiprisAPIError):
    """Raised when KIPRIS rate limiting (HTTP 429) is encountered."""


class PatentNotFoundError(Exception):
    """Raised when a single-record lookup matches no KIPRIS record."""


class KiprisConnector:
    """
    Connector for the KIPRIS Plus advanced search API.

    Each public call performs exactly one outbound request. Retries and
    pagination belong to the callers (`PagedFetcher`, service layer).
    """

    def __init__(
        self,
        config: Optional[KiprisConfig] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the KIPRIS connector.

        Args:
            config: Settings to use. If omitted, loaded from the config singleton.
            api_key: KIPRIS service key. Overrides the configured key.
            transport: Optional httpx transport, used to route requests
                through a custom or mock transport.
        """
        self.config = config or get_config()
        self.api_key = api_key or self.config.kipris_api_key
        self.search_url = self.config.search_url
        self.timeout = float(self.config.kipris_request_timeout_seconds)
        self._transport = transport

        if not self.api_key:
            logger.warning(
                "⚠️ No valid KIPRIS_API_KEY configured. API calls will fail."
            )

    @staticmethod
    def _namespace_wild(path: str) -> str:
        """Convert `a/b/c` path to namespace-agnostic ElementTree path."""
        return "/".join(f"{{*}}{node}" for node in path.split("/"))

    @staticmethod
    def _local_name(tag: str) -> str:
        return tag.rsplit("}", 1)[-1]

    @staticmethod
    def _first_text(root: ET.Element, *paths: str) -> Optional[str]:
        """Return the first non-empty text value matching the provided paths."""
        for path in paths:
            node = root.find(KiprisConnector._namespace_wild(path))
            if node is not None and node.text and node.text.strip():
                return node.text.strip()
        return None

    def _check_envelope(self, root: ET.Element) -> None:
        """
        Reject error envelopes.

        The data.go.kr gateway answers credential and quota problems with an
        `OpenAPI_ServiceResponse` document instead of `response`; KIPRIS itself
        reports failures through `header/resultCode` and `header/successYN`.
        """
        root_tag = self._local_name(root.tag)
        if root_tag != "response":
            message = (
                root.findtext(".//{*}returnAuthMsg")
                or root.findtext(".//{*}errMsg")
                or f"unexpected root element <{root_tag}>"
            )
            raise KiprisAPIError(f"KIPRIS service error: {message.strip()}")

        success = self._first_text(root, "header/successYN")
        result_code = self._first_text(root, "header/resultCode")
        if (success and success.upper() == "N") or (
            result_code and result_code not in SUCCESS_RESULT_CODES
        ):
            message = self._first_text(root, "header/resultMsg") or "Unknown KIPRIS fault"
            raise KiprisAPIError(f"KIPRIS search fault {result_code or 'N'}: {message}")

    def _count_field(self, root: ET.Element, name: str, default: int) -> int:
        """Read an integer from `count/<name>`, falling back to `default` when absent."""
        text = self._first_text(root, f"count/{name}")
        if text is None:
            return default
        try:
            return int(text)
        except ValueError as exc:
            raise KiprisAPIError(
                f"Failed to parse KIPRIS envelope: count/{name}={text!r} is not an integer"
            ) from exc

    def _item_to_mapping(self, node: ET.Element) -> Dict[str, str]:
        """Flatten one `item` element into `{element name: text}`."""
        return {self._local_name(child.tag): (child.text or "") for child in node}

    def _parse_page(self, root: ET.Element, page_number: int, page_size: int) -> Page:
        """Normalize a validated envelope into a `Page`."""
        items_node = root.find(self._namespace_wild("body/items"))
        item_nodes = (
            items_node.findall(self._namespace_wild("item"))
            if items_node is not None
            else []
        )
        records = tuple(
            RawPatentRecord.from_item(self._item_to_mapping(node)) for node in item_nodes
        )
        return Page(
            items=records,
            total_count=self._count_field(root, "totalCount", 0),
            page_size=self._count_field(root, "numOfRows", page_size),
            page_number=self._count_field(root, "pageNo", page_number),
        )

    async def _request(self, params: Mapping[str, Any]) -> ET.Element:
        """
        Issue one GET against the search endpoint and return the parsed root.

        Raises:
            KiprisRateLimitError: On HTTP 429.
            KiprisAPIError: On transport failure, non-200 status, or invalid XML.
        """
        request_params = dict(params)
        request_params["ServiceKey"] = self.api_key

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(self.search_url, params=request_params)
        except httpx.TimeoutException as exc:
            logger.error(f"Request timeout: {exc}")
            raise KiprisAPIError(f"KIPRIS request timeout: {exc}") from exc
        except httpx.RequestError as exc:
            logger.error(f"Request error: {exc}")
            raise KiprisAPIError(f"KIPRIS request error: {exc}") from exc

        if response.status_code == 429:
            logger.warning("Rate limit hit (429).")
            raise KiprisRateLimitError("KIPRIS rate limit exceeded.")
        if response.status_code != 200:
            error_msg = f"KIPRIS search error {response.status_code}: {response.text[:300]}"
            logger.error(error_msg)
            raise KiprisAPIError(error_msg)

        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as exc:
            raise KiprisAPIError(f"Failed to parse KIPRIS XML response: {exc}") from exc

        self._check_envelope(root)
        return root

    async def fetch_page(
        self,
        query: SearchQuery,
        page_number: int = 1,
        page_size: int = 100,
    ) -> Page:
        """
        Fetch one page of search results for a query.

        Args:
            query: Applicant, date window and optional advanced filters.
            page_number: 1-based page index.
            page_size: Rows per page (`numOfRows`).

        Returns:
            Normalized `Page`.

        Raises:
            KiprisAPIError: On request/parse failures.
        """
        if page_number < 1 or page_size < 1:
            raise ValueError("page_number and page_size must be >= 1")

        params = query.to_params()
        params["numOfRows"] = page_size
        params["pageNo"] = page_number

        root = await self._request(params)
        page = self._parse_page(root, page_number, page_size)
        logger.debug(
            "KIPRIS page %s/%s for %r: %s items (total %s)",
            page.page_number,
            page.total_pages,
            query.applicant,
            len(page.items),
            page.total_count,
        )
        return page

    async def get_patent_detail(self, application_number: str) -> RawPatentRecord:
        """
        Retrieve a single patent by application number.

        Raises:
            PatentNotFoundError: If KIPRIS returns no matching item.
            KiprisAPIError: On request/parse failures.
        """
        number = (application_number or "").strip()
        if not number:
            raise PatentNotFoundError("Empty application number.")

        root = await self._request({"applicationNumber": number})
        page = self._parse_page(root, page_number=1, page_size=1)
        if not page.items:
            raise PatentNotFoundError(f"No KIPRIS record for application {number}.")
        return page.items[0]

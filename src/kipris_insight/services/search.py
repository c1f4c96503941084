"""
Patent search operations for KIPRIS Insight.

Basic and advanced searches return a single page (20 rows by default); the
`search_all` variant walks every page through a `PagedFetcher` configured for
this call site.
"""

import logging
from typing import List, Optional, Union

from kipris_insight.core.config import KiprisConfig, get_config
from kipris_insight.core.models import DateLike, PatentListResult, RawPatentRecord, SearchQuery
from kipris_insight.core.status import RegistrationStatus
from kipris_insight.services.fetcher import PagedFetcher
from kipris_insight.tools.kipris_api import KiprisConnector

logger = logging.getLogger("PatentSearchService")

StatusFilter = Union[RegistrationStatus, str, None]


def _coerce_status(status: StatusFilter) -> RegistrationStatus:
    if isinstance(status, RegistrationStatus):
        return status
    return RegistrationStatus.from_label(status)


class PatentSearchService:
    """List and detail lookups against KIPRIS."""

    def __init__(
        self,
        connector: Optional[KiprisConnector] = None,
        config: Optional[KiprisConfig] = None,
    ) -> None:
        self.config = config or get_config()
        self.connector = connector or KiprisConnector(config=self.config)

    async def _search_page(self, query: SearchQuery, page: int) -> PatentListResult:
        result = await self.connector.fetch_page(
            query,
            page_number=max(1, page),
            page_size=self.config.search_page_size,
        )
        logger.info(
            "Search %r page %s: %s of %s records",
            query.applicant,
            result.page_number,
            len(result.items),
            result.total_count,
        )
        return PatentListResult.from_page(result)

    async def basic_search(
        self,
        applicant: str,
        start_date: DateLike,
        end_date: DateLike,
        page: int = 1,
    ) -> PatentListResult:
        """Search by applicant and application-date window."""
        query = SearchQuery(
            applicant=applicant,
            date_range_start=start_date,
            date_range_end=end_date,
        )
        return await self._search_page(query, page)

    async def advanced_search(
        self,
        applicant: str,
        start_date: DateLike,
        end_date: DateLike,
        invention_title: Optional[str] = None,
        registration_status: StatusFilter = None,
        page: int = 1,
    ) -> PatentListResult:
        """
        Search with optional title and registration-status filters.

        Args:
            registration_status: A `RegistrationStatus` or its Korean label
                (e.g. `"등록"`); unknown labels apply no status filter.
        """
        query = SearchQuery(
            applicant=applicant,
            date_range_start=start_date,
            date_range_end=end_date,
            invention_title=invention_title or None,
            registration_status=_coerce_status(registration_status),
        )
        return await self._search_page(query, page)

    async def search_all(
        self,
        applicant: str,
        start_date: DateLike,
        end_date: DateLike,
        invention_title: Optional[str] = None,
        registration_status: StatusFilter = None,
        concurrency_limit: Optional[int] = None,
        batch_delay_seconds: Optional[float] = None,
    ) -> List[RawPatentRecord]:
        """Collect every matching record using rate-limited batches."""
        query = SearchQuery(
            applicant=applicant,
            date_range_start=start_date,
            date_range_end=end_date,
            invention_title=invention_title or None,
            registration_status=_coerce_status(registration_status),
        )
        fetcher = PagedFetcher(
            self.connector,
            concurrency_limit=concurrency_limit,
            batch_delay_seconds=batch_delay_seconds,
            config=self.config,
        )
        return await fetcher.fetch_all(query)

    async def get_detail(self, application_number: str) -> RawPatentRecord:
        """
        Look up one application.

        Raises:
            PatentNotFoundError: If no record matches.
        """
        return await self.connector.get_patent_detail(application_number)

"""
Paged retrieval of complete KIPRIS result sets.

`PagedFetcher` reads page 1 to learn the total count, then requests the
remaining pages in concurrent batches, sleeping between batches to stay under
the upstream rate limit. Any failed page fails the whole fetch.
"""

import asyncio
import logging
import math
from typing import List, Optional, Protocol, Sequence

from kipris_insight.core.config import MIN_BATCH_DELAY_SECONDS, KiprisConfig, get_config
from kipris_insight.core.models import Page, RawPatentRecord, SearchQuery

logger = logging.getLogger("PagedFetcher")


class PageSource(Protocol):
    async def fetch_page(
        self, query: SearchQuery, page_number: int = 1, page_size: int = 100
    ) -> Page:
        ...


def plan_batches(total_pages: int, concurrency_limit: int) -> List[List[int]]:
    """Split pages `2..total_pages` into consecutive groups of at most `concurrency_limit`."""
    remaining = list(range(2, total_pages + 1))
    return [
        remaining[start:start + concurrency_limit]
        for start in range(0, len(remaining), concurrency_limit)
    ]


class PagedFetcher:
    """
    Retrieves every record matching a query.

    Parameters
    ----------
    client : PageSource
        Anything exposing `fetch_page` (normally `KiprisConnector`).
    page_size : int, optional
        Rows requested per page. Defaults to `summary_page_size` (100).
    concurrency_limit : int, optional
        Pages requested in parallel per batch. Defaults to
        `fetch_concurrency_limit` (5).
    batch_delay_seconds : float, optional
        Pause inserted before every batch after the first. Defaults to
        `batch_delay_seconds` (0.25) and may not be below 0.2.
    """

    def __init__(
        self,
        client: PageSource,
        page_size: Optional[int] = None,
        concurrency_limit: Optional[int] = None,
        batch_delay_seconds: Optional[float] = None,
        config: Optional[KiprisConfig] = None,
    ) -> None:
        config = config or get_config()
        self.client = client
        self.page_size = config.summary_page_size if page_size is None else page_size
        self.concurrency_limit = (
            config.fetch_concurrency_limit if concurrency_limit is None else concurrency_limit
        )
        self.batch_delay_seconds = (
            config.batch_delay_seconds if batch_delay_seconds is None else batch_delay_seconds
        )

        if self.page_size < 1 or self.concurrency_limit < 1:
            raise ValueError("page_size and concurrency_limit must be >= 1")
        if self.batch_delay_seconds < MIN_BATCH_DELAY_SECONDS:
            raise ValueError(
                f"batch_delay_seconds must be at least {MIN_BATCH_DELAY_SECONDS}s"
            )

    async def _fetch_batch(self, query: SearchQuery, pages: Sequence[int]) -> List[Page]:
        """Fetch a batch of pages concurrently; results are returned in page order."""
        tasks = [
            asyncio.ensure_future(self.client.fetch_page(query, page, self.page_size))
            for page in pages
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # drain cancelled siblings so none is left pending
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def fetch_all(self, query: SearchQuery) -> List[RawPatentRecord]:
        """
        Fetch the full result set for a query.

        Returns:
            Records in page order: page 1 first, then each batch in turn.

        Raises:
            KiprisAPIError: If any page request fails. No partial list is returned.
        """
        first = await self.client.fetch_page(query, 1, self.page_size)
        total_pages = math.ceil(first.total_count / self.page_size) if first.total_count > 0 else 0

        items: List[RawPatentRecord] = list(first.items)
        if total_pages <= 1:
            logger.info(
                "Fetched %s records for %r in a single page", len(items), query.applicant
            )
            return items

        batches = plan_batches(total_pages, self.concurrency_limit)
        logger.info(
            "Fetching %s pages for %r (%s total records) in %s batches",
            total_pages,
            query.applicant,
            first.total_count,
            len(batches),
        )

        for index, batch in enumerate(batches):
            if index > 0:
                await asyncio.sleep(self.batch_delay_seconds)
            pages = await self._fetch_batch(query, batch)
            for page in pages:
                items.extend(page.items)
            logger.debug(
                "Batch %s/%s done (pages %s-%s), %s records so far",
                index + 1,
                len(batches),
                batch[0],
                batch[-1],
                len(items),
            )

        logger.info("Fetched %s records for %r", len(items), query.applicant)
        return items

"""
Summary analytics for KIPRIS Insight.

`PatentStatAnalyzer` turns a complete record list into a `SummaryResult`;
`PatentSummaryService` wires the connector, the paged fetcher and the
analyzer together behind `summarize()`.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from kipris_insight.core import ipc
from kipris_insight.core.config import KiprisConfig, get_config
from kipris_insight.core.models import DateLike, RawPatentRecord, SearchQuery
from kipris_insight.services.fetcher import PagedFetcher
from kipris_insight.tools.kipris_api import KiprisConnector, KiprisRateLimitError
from kipris_insight.utils.artifacts import (
    ClassificationCount,
    MonthlyCount,
    RecentPatent,
    SummaryResult,
)

logger = logging.getLogger("PatentStatAnalyzer")
service_logger = logging.getLogger("PatentSummaryService")

OTHER_STATUS = "other"
TOP_CLASSIFICATIONS = 5
RECENT_PATENTS = 3
TRAILING_MONTHS = 6


def _month_key(application_date: str) -> Optional[str]:
    """`YYYYMMDD` -> `YYYY-MM`; None when the date has no usable month."""
    digits = (application_date or "").strip()[:6]
    if len(digits) < 6 or not digits.isdigit():
        return None
    return f"{digits[:4]}-{digits[4:6]}"


class PatentStatAnalyzer:
    """
    Computes the fixed summary facets over an in-memory record list.

    Working Methods
    ---------------
    1) Status distribution: count per `registerStatus` label, with empty labels
       counted under `other`; percentages are `round(count / total * 100, 2)`.
    2) Monthly trend: count per `YYYY-MM` taken from the application date,
       sorted ascending by the month key.
    3) Trailing average: mean of the last six trend entries (fewer when the
       trend is shorter), rounded to two decimals; 0 for an empty trend.
    4) Top classifications: count per IPC main code, most frequent first,
       ties kept in first-seen order, top five only.
    5) Recent patents: the three latest applications by numeric date.

    No I/O; calling `analyze` twice on the same input gives equal results.
    """

    def analyze(self, items: Sequence[RawPatentRecord]) -> SummaryResult:
        total = len(items)
        if total == 0:
            logger.info("No records to analyze; returning empty summary")
            return SummaryResult(total_count=0)

        status_counts: Dict[str, int] = {}
        monthly: Counter = Counter()
        classification_counts: Dict[str, int] = {}

        for record in items:
            status = record.registration_status or OTHER_STATUS
            status_counts[status] = status_counts.get(status, 0) + 1

            month = _month_key(record.application_date)
            if month is not None:
                monthly[month] += 1

            code = ipc.main_code(record.classification_codes)
            if code is not None:
                classification_counts[code] = classification_counts.get(code, 0) + 1

        status_percent = {
            status: round(count / total * 100, 2) for status, count in status_counts.items()
        }

        monthly_trend = tuple(
            MonthlyCount(month=month, count=count) for month, count in sorted(monthly.items())
        )

        trailing = monthly_trend[-TRAILING_MONTHS:]
        avg_monthly_count = 0.0
        if trailing:
            avg_monthly_count = round(sum(entry.count for entry in trailing) / len(trailing), 2)

        # sorted() is stable, so equal counts keep first-seen order
        ranked = sorted(classification_counts.items(), key=lambda pair: pair[1], reverse=True)
        top_classifications = tuple(
            ClassificationCount(code=code, name=ipc.korean_name(code), count=count)
            for code, count in ranked[:TOP_CLASSIFICATIONS]
        )

        latest = sorted(items, key=lambda record: record.application_date_value, reverse=True)
        recent_patents = tuple(self._recent_entry(record) for record in latest[:RECENT_PATENTS])

        logger.debug(
            "Analyzed %s records: %s statuses, %s months, %s classification codes",
            total,
            len(status_counts),
            len(monthly_trend),
            len(classification_counts),
        )
        return SummaryResult(
            total_count=total,
            status_counts=status_counts,
            status_percent=status_percent,
            monthly_trend=monthly_trend,
            top_classifications=top_classifications,
            recent_patents=recent_patents,
            avg_monthly_count=avg_monthly_count,
        )

    @staticmethod
    def _recent_entry(record: RawPatentRecord) -> RecentPatent:
        code, name = ipc.resolve(record.classification_codes)
        return RecentPatent(
            application_number=record.application_number,
            applicant_name=record.applicant_name,
            invention_title=record.invention_title,
            application_date=record.application_date,
            registration_status=record.registration_status,
            ipc_main=code,
            ipc_name=name,
        )


class PatentSummaryService:
    """Fetches every record for an applicant/date window and summarizes it."""

    def __init__(
        self,
        connector: Optional[KiprisConnector] = None,
        config: Optional[KiprisConfig] = None,
        fetcher: Optional[PagedFetcher] = None,
        analyzer: Optional[PatentStatAnalyzer] = None,
    ) -> None:
        self.config = config or get_config()
        self.connector = connector or KiprisConnector(config=self.config)
        self.fetcher = fetcher or PagedFetcher(self.connector, config=self.config)
        self.analyzer = analyzer or PatentStatAnalyzer()

    async def fetch_records(
        self, applicant: str, start_date: DateLike, end_date: DateLike
    ) -> List[RawPatentRecord]:
        query = SearchQuery(
            applicant=applicant,
            date_range_start=start_date,
            date_range_end=end_date,
        )
        return await self.fetcher.fetch_all(query)

    async def summarize(
        self, applicant: str, start_date: DateLike, end_date: DateLike
    ) -> SummaryResult:
        """
        Build the summary for one applicant and date window.

        Raises:
            KiprisAPIError: Propagated unchanged from the fetch.
        """
        records = await self.fetch_records(applicant, start_date, end_date)
        result = self.analyzer.analyze(records)
        service_logger.info(
            "Summary for %r (%s~%s): %s records", applicant, start_date, end_date, result.total_count
        )
        return result

    async def summarize_with_retry(
        self, applicant: str, start_date: DateLike, end_date: DateLike
    ) -> SummaryResult:
        """
        `summarize` wrapped in exponential backoff for upstream rate limiting.

        Only `KiprisRateLimitError` is retried, up to `max_retry_attempts`
        attempts in total; every other error propagates immediately.
        """
        result: Optional[SummaryResult] = None
        async for attempt in AsyncRetrying(
            wait=wait_exponential(multiplier=self.config.retry_delay_multiplier, max=10),
            stop=stop_after_attempt(self.config.max_retry_attempts),
            retry=retry_if_exception_type(KiprisRateLimitError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    service_logger.warning(
                        "Retrying summary for %r after rate limit (attempt %s)",
                        applicant,
                        attempt.retry_state.attempt_number,
                    )
                result = await self.summarize(applicant, start_date, end_date)
        return result

"""
Typed records exchanged between the KIPRIS connector, the fetcher and the
analytics layer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from kipris_insight.core.status import RegistrationStatus

DateLike = Union[date, str]


def format_kipris_date(value: DateLike) -> str:
    """Render a date as KIPRIS `YYYYMMDD` (ISO `YYYY-MM-DD` strings are accepted)."""
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value).strip().replace("-", "")


@dataclass(frozen=True)
class SearchQuery:
    """Applicant + application-date window, with optional advanced filters."""
    applicant: str
    date_range_start: DateLike
    date_range_end: DateLike
    invention_title: Optional[str] = None
    registration_status: RegistrationStatus = RegistrationStatus.UNSPECIFIED

    def date_filter(self) -> str:
        """Combined `start~end` filter for the `applicationDate` parameter."""
        return (
            f"{format_kipris_date(self.date_range_start)}"
            f"~{format_kipris_date(self.date_range_end)}"
        )

    def to_params(self) -> Dict[str, Any]:
        """Upstream query parameters, excluding credentials and paging."""
        params: Dict[str, Any] = {
            "applicant": self.applicant,
            "patent": "true",
            "applicationDate": self.date_filter(),
        }
        if self.invention_title:
            params["inventionTitle"] = self.invention_title
        if self.registration_status is not RegistrationStatus.UNSPECIFIED:
            params["lastvalue"] = self.registration_status.code
        return params


# KIPRIS item element -> RawPatentRecord attribute
_ITEM_FIELDS = {
    "applicationNumber": "application_number",
    "applicantName": "applicant_name",
    "applicationDate": "application_date",
    "inventionTitle": "invention_title",
    "ipcNumber": "classification_codes",
    "registerStatus": "registration_status",
    "openNumber": "open_number",
    "openDate": "open_date",
    "publicationNumber": "publication_number",
    "publicationDate": "publication_date",
    "registerNumber": "register_number",
    "registerDate": "register_date",
    "astrtCont": "abstract",
    "drawing": "drawing_url",
}


@dataclass(frozen=True)
class RawPatentRecord:
    """One KIPRIS search result item."""
    application_number: str = ""
    applicant_name: str = ""
    application_date: str = ""
    invention_title: Optional[str] = None
    classification_codes: str = ""
    registration_status: str = ""
    open_number: Optional[str] = None
    open_date: Optional[str] = None
    publication_number: Optional[str] = None
    publication_date: Optional[str] = None
    register_number: Optional[str] = None
    register_date: Optional[str] = None
    abstract: Optional[str] = None
    drawing_url: Optional[str] = None

    @classmethod
    def from_item(cls, item: Mapping[str, Optional[str]]) -> "RawPatentRecord":
        """
        Build a record from a flat mapping of KIPRIS element names to text.

        Missing and blank elements both fall back to the field default, so an
        empty `<inventionTitle/>` reads as None like an absent one.
        """
        values: Dict[str, Any] = {}
        for source, target in _ITEM_FIELDS.items():
            text = (item.get(source) or "").strip()
            if text:
                values[target] = text
        return cls(**values)

    @property
    def status(self) -> RegistrationStatus:
        return RegistrationStatus.from_label(self.registration_status)

    @property
    def application_date_value(self) -> int:
        """Numeric application date for ordering; 0 when missing or malformed."""
        digits = self.application_date.strip()
        return int(digits) if digits.isdigit() else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the upstream camelCase shape."""
        return {source: getattr(self, target) for source, target in _ITEM_FIELDS.items()}


@dataclass(frozen=True)
class Page:
    """One normalized page of a KIPRIS search response."""
    items: Tuple[RawPatentRecord, ...]
    total_count: int
    page_size: int
    page_number: int

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0 or self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)


@dataclass(frozen=True)
class PatentListResult:
    """Paged list returned by the basic and advanced search operations."""
    total: int
    page: int
    total_pages: int
    patents: Tuple[RawPatentRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_page(cls, page: Page) -> "PatentListResult":
        return cls(
            total=page.total_count,
            page=page.page_number,
            total_pages=page.total_pages,
            patents=page.items,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
            "patents": [patent.to_dict() for patent in self.patents],
        }

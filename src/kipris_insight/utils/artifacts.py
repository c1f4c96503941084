"""
Result artifacts for KIPRIS Insight.
Immutable summary objects returned by the analytics service, with helpers to
render them for API responses.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from kipris_insight.core.status import RegistrationStatus


@dataclass(frozen=True)
class MonthlyCount:
    """Number of applications filed in one `YYYY-MM` month."""
    month: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "count": self.count}


@dataclass(frozen=True)
class ClassificationCount:
    """Application count for one IPC main code."""
    code: str
    name: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "korName": self.name, "count": self.count}


@dataclass(frozen=True)
class RecentPatent:
    """Normalized view of one of the most recent applications."""
    application_number: str
    applicant_name: str
    invention_title: Optional[str]
    application_date: str
    registration_status: str
    ipc_main: Optional[str]
    ipc_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applicationNumber": self.application_number,
            "applicantName": self.applicant_name,
            "inventionTitle": self.invention_title,
            "applicationDate": self.application_date,
            "registerStatus": self.registration_status,
            "ipcMain": self.ipc_main,
            "ipcKorName": self.ipc_name,
        }


@dataclass(frozen=True)
class SummaryResult:
    """
    Aggregate statistics for an applicant over a date window.

    An empty result set is represented with `total_count == 0` and empty
    facets; it is not an error.
    """
    total_count: int
    status_counts: Mapping[str, int] = field(default_factory=dict)
    status_percent: Mapping[str, float] = field(default_factory=dict)
    monthly_trend: Tuple[MonthlyCount, ...] = ()
    top_classifications: Tuple[ClassificationCount, ...] = ()
    recent_patents: Tuple[RecentPatent, ...] = ()
    avg_monthly_count: float = 0.0

    def __post_init__(self) -> None:
        # status facets are read-only views over private copies
        object.__setattr__(self, "status_counts", MappingProxyType(dict(self.status_counts)))
        object.__setattr__(self, "status_percent", MappingProxyType(dict(self.status_percent)))

    @property
    def registration_rate(self) -> float:
        """Percentage of applications in the registered (`등록`) state."""
        return self.status_percent.get(RegistrationStatus.REGISTERED.label, 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "totalCount": self.total_count,
            "statusCount": dict(self.status_counts),
            "statusPercent": dict(self.status_percent),
            "monthlyTrend": [entry.to_dict() for entry in self.monthly_trend],
            "topIPC": [entry.to_dict() for entry in self.top_classifications],
            "recentPatents": [entry.to_dict() for entry in self.recent_patents],
            "avgMonthlyCount": self.avg_monthly_count,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_response(self, applicant: str, start_date: str, end_date: str) -> Dict[str, Any]:
        """
        Render the summary endpoint payload.

        Args:
            applicant: Applicant the summary was computed for.
            start_date: Window start as supplied by the caller.
            end_date: Window end as supplied by the caller.

        Returns:
            Dictionary with `statistics`, `ipcDistribution`,
            `statusDistribution`, `monthlyTrend` and `recentPatents`.
        """
        return {
            "applicant": applicant,
            "period": {"startDate": start_date, "endDate": end_date},
            "statistics": {
                "totalPatents": self.total_count,
                "monthlyAverage": self.avg_monthly_count,
                "registrationRate": self.registration_rate,
            },
            "ipcDistribution": [
                {"ipcCode": entry.code, "ipcKorName": entry.name, "count": entry.count}
                for entry in self.top_classifications
            ],
            "statusDistribution": [
                {"status": status, "count": count}
                for status, count in self.status_counts.items()
            ],
            "monthlyTrend": [entry.to_dict() for entry in self.monthly_trend],
            "recentPatents": [entry.to_dict() for entry in self.recent_patents],
        }

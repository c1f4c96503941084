"""
Registration status vocabulary for KIPRIS records.

KIPRIS reports `registerStatus` as a Korean label on every record, while the
search endpoint filters on a single-letter `lastvalue` code. `RegistrationStatus`
holds both sides of that mapping.
"""

from enum import Enum
from typing import Optional


class RegistrationStatus(Enum):
    """Closed set of KIPRIS registration states, valued by Korean label."""
    PUBLISHED = "공개"
    WITHDRAWN = "취하"
    EXTINGUISHED = "소멸"
    ABANDONED = "포기"
    INVALIDATED = "무효"
    REJECTED = "거절"
    REGISTERED = "등록"
    UNSPECIFIED = ""

    @property
    def label(self) -> str:
        return self.value

    @property
    def code(self) -> str:
        """Upstream `lastvalue` filter code (empty for UNSPECIFIED)."""
        return _LABEL_TO_CODE[self]

    @classmethod
    def from_label(cls, label: Optional[str]) -> "RegistrationStatus":
        """Resolve a Korean status label; unknown or empty labels map to UNSPECIFIED."""
        value = (label or "").strip()
        for status in cls:
            if status.value == value:
                return status
        return cls.UNSPECIFIED

    @classmethod
    def from_code(cls, code: Optional[str]) -> "RegistrationStatus":
        """Resolve an upstream `lastvalue` code; unknown codes map to UNSPECIFIED."""
        value = (code or "").strip().upper()
        return _CODE_TO_LABEL.get(value, cls.UNSPECIFIED)


_LABEL_TO_CODE = {
    RegistrationStatus.PUBLISHED: "A",
    RegistrationStatus.WITHDRAWN: "C",
    RegistrationStatus.EXTINGUISHED: "F",
    RegistrationStatus.ABANDONED: "G",
    RegistrationStatus.INVALIDATED: "I",
    RegistrationStatus.REJECTED: "J",
    RegistrationStatus.REGISTERED: "R",
    RegistrationStatus.UNSPECIFIED: "",
}

_CODE_TO_LABEL = {code: status for status, code in _LABEL_TO_CODE.items() if code}

"""Finding and risk data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Severity(str, Enum):
    """Severity attached to a finding."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Parse a severity case-insensitively ("high" -> HIGH)."""
        if isinstance(value, Severity):
            return value
        return cls(str(value).strip().upper())


@dataclass(frozen=True)
class Finding:
    """A structured, severity-tagged issue found in the source under review."""

    severity: Severity
    issue: str
    location: str
    remediation: str
    fixed_code: str | None = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "issue": self.issue,
            "location": self.location,
            "remediation": self.remediation,
            "fixed_code": self.fixed_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Finding":
        return cls(
            severity=Severity.parse(data["severity"]),
            issue=data["issue"],
            location=data.get("location") or "unknown",
            remediation=data["remediation"],
            fixed_code=data.get("fixed_code"),
        )


@dataclass(frozen=True)
class RiskPoint:
    """One sample of the run risk score, clamped to [0, 100]."""

    score: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

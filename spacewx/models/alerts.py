"""Alert data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import uuid4


class AlertRule(StrEnum):
    """Rules that can emit an alert."""

    STRONG_FLARE = "strong_flare"
    HIGH_KP = "high_kp"


@dataclass(frozen=True)
class AlertRecord:
    """A timestamped alert message appended to the alert log."""

    message: str
    rule: AlertRule
    created_at: datetime
    alert_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict[str, str]:
        return {
            "alert_id": self.alert_id,
            "rule": self.rule.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }

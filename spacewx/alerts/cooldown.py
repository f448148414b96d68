"""Per-rule repeat suppression for alerts.

Disabled by default (zero cooldown): every cycle whose condition holds
re-alerts.  With a positive cooldown, an alert is suppressed when the same
rule emitted the identical message less than ``cooldown`` ago.  State is held
in-process; restarting resets all cooldowns.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from spacewx.models.alerts import AlertRecord, AlertRule
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import alerts_suppressed_total

_log = get_logger("alerts.cooldown")


class AlertCooldown:
    """Suppresses an identical alert from the same rule within ``cooldown``."""

    def __init__(self, cooldown: timedelta = timedelta(0)) -> None:
        self._cooldown = cooldown
        # rule -> (message, last emitted at)
        self._last_sent: dict[AlertRule, tuple[str, datetime]] = {}

    @property
    def enabled(self) -> bool:
        return self._cooldown > timedelta(0)

    def should_send(self, record: AlertRecord) -> bool:
        """Return True if *record* should be appended to the log."""
        if not self.enabled:
            return True
        last = self._last_sent.get(record.rule)
        if last is not None:
            message, sent_at = last
            elapsed = record.created_at - sent_at
            if message == record.message and elapsed < self._cooldown:
                _log.debug(
                    "alert_suppressed_by_cooldown",
                    rule=record.rule.value,
                    seconds_remaining=int((self._cooldown - elapsed).total_seconds()),
                )
                alerts_suppressed_total.labels(rule=record.rule.value).inc()
                return False
        self._last_sent[record.rule] = (record.message, record.created_at)
        return True

    def filter(self, records: list[AlertRecord]) -> list[AlertRecord]:
        return [r for r in records if self.should_send(r)]

    def reset(self, rule: AlertRule) -> None:
        """Forget the last emission of *rule* so its next alert is sent."""
        self._last_sent.pop(rule, None)

"""Alert rules evaluated once per completed refresh cycle.

Rules are stateless: the same snapshot always yields the same messages, so
an unchanged condition re-alerts on every cycle unless an AlertCooldown is
applied by the caller.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import datetime

from spacewx.models.alerts import AlertRecord, AlertRule
from spacewx.models.config import RefreshConfig
from spacewx.models.snapshot import Snapshot
from spacewx.observability.logging import get_logger
from spacewx.timeutil import format_display

_logger = get_logger("alerts.rules")

HIGH_KP_THRESHOLD = 5.0


class AlertRuleEvaluator(ABC):
    """A single alert rule: inspect a snapshot, optionally return a message."""

    rule: AlertRule
    display_name: str

    @abstractmethod
    def enabled(self, config: RefreshConfig) -> bool:
        """Whether the user toggle for this rule is on."""

    @abstractmethod
    def evaluate(self, snapshot: Snapshot) -> str | None:
        """Return the alert message, or None when the condition does not hold."""


class StrongFlareRule(AlertRuleEvaluator):
    """Fires when the snapshot contains a significant (M5+ or X) flare."""

    rule = AlertRule.STRONG_FLARE
    display_name = "Strong flare (M5+ or any X-class)"

    def enabled(self, config: RefreshConfig) -> bool:
        return config.alert_strong_flare

    def evaluate(self, snapshot: Snapshot) -> str | None:
        flare = snapshot.latest_significant_flare
        if flare is None:
            return None
        return f"Strong flare: {flare.class_type} at {format_display(flare.begin_time)}"


class HighKpRule(AlertRuleEvaluator):
    """Fires when the latest Kp reading is 5.0 or higher."""

    rule = AlertRule.HIGH_KP
    display_name = "Geomagnetic storm (Kp >= 5)"

    def enabled(self, config: RefreshConfig) -> bool:
        return config.alert_high_kp

    def evaluate(self, snapshot: Snapshot) -> str | None:
        kp = snapshot.latest_kp
        if kp is None or math.isnan(kp) or kp < HIGH_KP_THRESHOLD:
            return None
        return f"Geomagnetic storm: Kp {kp:.1f} (auroras possible!)"


DEFAULT_RULES: tuple[AlertRuleEvaluator, ...] = (StrongFlareRule(), HighKpRule())


def evaluate_alerts(
    snapshot: Snapshot,
    config: RefreshConfig,
    now: datetime,
    rules: tuple[AlertRuleEvaluator, ...] = DEFAULT_RULES,
) -> list[AlertRecord]:
    """Run every enabled rule in order and return the resulting records."""
    records: list[AlertRecord] = []
    for rule in rules:
        if not rule.enabled(config):
            continue
        message = rule.evaluate(snapshot)
        if message is None:
            continue
        _logger.info("alert_condition_met", rule=rule.rule.value, message=message)
        records.append(AlertRecord(message=message, rule=rule.rule, created_at=now))
    return records

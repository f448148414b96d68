"""Alert engine for SpaceWx.

Exports:
    AlertRuleEvaluator -- Base class for a single rule.
    StrongFlareRule    -- M5+ or X-class flare present in the snapshot.
    HighKpRule         -- Latest Kp at or above 5.0.
    evaluate_alerts    -- Run the enabled rules for one refresh cycle.
    AlertLog           -- Ordered, append-only alert log.
    AlertCooldown      -- Optional per-rule repeat suppression.
"""

from spacewx.alerts.cooldown import AlertCooldown
from spacewx.alerts.log import AlertLog
from spacewx.alerts.rules import (
    AlertRuleEvaluator,
    HighKpRule,
    StrongFlareRule,
    evaluate_alerts,
)

__all__ = [
    "AlertCooldown",
    "AlertLog",
    "AlertRuleEvaluator",
    "HighKpRule",
    "StrongFlareRule",
    "evaluate_alerts",
]

# ==============================================
# PERSISTENCE (Usage statistics across reinstalls)
# ==============================================
#
# This package keeps app usage counters in both tiers and uses the
# durable copy to notice when the volatile tier has been wiped.
#
# Modules:
# --------
# - usage_statistics.py   → UsageStatistics record (to_dict / from_dict)
# - statistics_engine.py  → Load, reconcile, update and reset
#
# ==============================================

from .usage_statistics import UsageStatistics
from .statistics_engine import (
    DURABLE_STATISTICS_KEY,
    STATISTICS_ACCESSIBILITY,
    VOLATILE_STATISTICS_KEY,
    StatisticsEngine,
)

__all__ = [
    "UsageStatistics",
    "StatisticsEngine",
    "DURABLE_STATISTICS_KEY",
    "STATISTICS_ACCESSIBILITY",
    "VOLATILE_STATISTICS_KEY",
]

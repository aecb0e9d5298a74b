from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class UsageStatistics:
    """App usage counters, mirrored in both tiers."""
    days_using_app: int = 0
    times_using_app: int = 0
    times_daily_using_app: int = 0
    last_day_opened: Optional[datetime] = None  # None until the first update
    times_app_installed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "days_using_app": self.days_using_app,
            "times_using_app": self.times_using_app,
            "times_daily_using_app": self.times_daily_using_app,
            "last_day_opened": self.last_day_opened.isoformat() if self.last_day_opened else None,
            "times_app_installed": self.times_app_installed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageStatistics":
        """Create from dictionary (deserialization)"""
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        last_day = data.get("last_day_opened")
        return cls(
            days_using_app=int(data.get("days_using_app", 0)),
            times_using_app=int(data.get("times_using_app", 0)),
            times_daily_using_app=int(data.get("times_daily_using_app", 0)),
            last_day_opened=datetime.fromisoformat(last_day) if last_day else None,
            times_app_installed=int(data.get("times_app_installed", 0)),
        )

    def is_zero(self) -> bool:
        return (
            self.days_using_app == 0
            and self.times_using_app == 0
            and self.times_daily_using_app == 0
            and self.times_app_installed == 0
        )

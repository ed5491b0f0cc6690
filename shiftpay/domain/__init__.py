"""Domain layer definitions."""

from .schedule import ScheduleSnapshot, TenantSchedule

__all__ = [
    "ScheduleSnapshot",
    "TenantSchedule",
]

"""Infrastructure layer exports."""

from .schedule import InMemoryScheduleRepository, ScheduleRepository

__all__ = [
    "InMemoryScheduleRepository",
    "ScheduleRepository",
]

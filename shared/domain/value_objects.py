"""
Common Value Objects

- DateRange: a stay period from check-in to check-out
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from shared.domain.base import ValueObject

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a stay from start (check-in) to end (check-out). Both ends
    are datetimes; a partial day counts as a whole night.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    @property
    def nights(self) -> int:
        """Number of nights, rounded up to whole days"""
        return math.ceil(abs((self.end - self.start).total_seconds()) / SECONDS_PER_DAY)

    def hours_from(self, moment: datetime) -> float:
        """Hours remaining between `moment` and the start of the range"""
        return (self.start - moment) / timedelta(hours=1)

    def __str__(self):
        return f"{self.start:%d.%m.%Y %H:%M} - {self.end:%d.%m.%Y %H:%M}"

    def __repr__(self):
        return f"DateRange({self.start.isoformat()}, {self.end.isoformat()})"

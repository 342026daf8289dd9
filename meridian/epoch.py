"""
Daily epoch bookkeeping.

Daily ceilings (wallet transfer volume, issuer mint/burn volume) reset lazily:
the stored epoch marker is compared against the current UTC day at the point
of use, never by a background sweep.
"""

from dataclasses import dataclass


SECONDS_PER_DAY = 86400


def epoch_start(timestamp: int) -> int:
    """Start of the UTC day containing ``timestamp``."""
    return timestamp - (timestamp % SECONDS_PER_DAY)


def is_stale(marker: int, now: int) -> bool:
    """True when ``marker`` belongs to an earlier UTC day than ``now``."""
    return epoch_start(marker) != epoch_start(now)


def within_limit(limit: int, used: int, amount: int) -> bool:
    """A zero limit means unlimited."""
    return limit == 0 or used + amount <= limit


@dataclass
class DailyCounter:
    """
    One daily volume counter with its epoch marker.

    Callers hold the owning record's lock across ``allows`` and ``add``.
    """
    volume: int = 0
    epoch: int = 0

    def current(self, now: int) -> int:
        """Volume as seen at ``now``; a stale epoch reads as zero."""
        return 0 if is_stale(self.epoch, now) else self.volume

    def allows(self, limit: int, amount: int, now: int) -> bool:
        return within_limit(limit, self.current(now), amount)

    def add(self, amount: int, now: int) -> None:
        if is_stale(self.epoch, now):
            self.volume = 0
            self.epoch = epoch_start(now)
        self.volume += amount

    def reset(self, now: int) -> None:
        self.volume = 0
        self.epoch = epoch_start(now)

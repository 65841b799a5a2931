from dataclasses import dataclass
from typing import Optional

from ..config import GOAL

# Last observation before the stats page was first scraped
FALLBACK_TOTAL = 495733451
FALLBACK_RATE = 12.219936728395
FALLBACK_UPDATED_AT = 1474525501

UNKNOWN_ETA = "--:--:--"


@dataclass(frozen=True)
class Snapshot:
    total: int
    rate: float
    updated_at: int


@dataclass
class EstimatorState:
    total: int = FALLBACK_TOTAL
    rate: float = FALLBACK_RATE
    snapshot_at: int = FALLBACK_UPDATED_AT
    last_refresh_at: int = 0

    def apply(self, snapshot: Snapshot, now: int) -> None:
        """Replace the ground-truth observation with a freshly fetched one."""
        self.total = snapshot.total
        self.rate = snapshot.rate
        self.snapshot_at = snapshot.updated_at
        self.last_refresh_at = now

    def extrapolate(self, now: int) -> int:
        """Estimate the total at ``now`` from the last snapshot."""
        return extrapolate(self.total, self.rate, now - self.snapshot_at)


def extrapolate(total: int, rate: float, elapsed: float) -> int:
    return int(round(total + rate * elapsed))


def eta_seconds(extrapolated: int, rate: float, goal: int = GOAL) -> Optional[int]:
    """
    Seconds left until ``goal`` at the current rate.

    Returns 0 once the goal is reached and None when the rate cannot get
    there (zero or negative).
    """
    if extrapolated >= goal:
        return 0
    if rate <= 0:
        return None
    return int(round((goal - extrapolated) / rate))


def format_eta(seconds: Optional[int]) -> str:
    """Format seconds as HH:MM:SS; hours may exceed two digits."""
    if seconds is None:
        return UNKNOWN_ETA
    hours = seconds // 3600
    seconds -= hours * 3600
    minutes = seconds // 60
    seconds -= minutes * 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def refresh_due(now: int, last_refresh_at: int, interval: int) -> bool:
    """
    Check whether a refresh may run at ``now``.

    Both the interval has to have passed and ``now`` has to fall on a
    minute boundary, so at most one refresh happens per minute.
    """
    if now - last_refresh_at < interval:
        return False
    return now % 60 == 0

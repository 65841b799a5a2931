from dataclasses import dataclass

from rich.theme import Theme

STATS_URL = "https://symfony.com/500million"
GOAL = 500_000_000

THEME = Theme(
    {"info": "cyan", "warning": "yellow", "error": "red", "success": "green"}
)


@dataclass
class StatsSourceConfig:
    url: str = STATS_URL
    timeout: int = 15  # Seconds for the whole request


@dataclass
class WatchConfig:
    refresh_interval: int = 600  # Minimum seconds between refreshes
    tick_interval: float = 1.0
    goal: int = GOAL


@dataclass
class OutputConfig:
    verbose: bool = False

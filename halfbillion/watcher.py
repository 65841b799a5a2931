import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
)

from halfbillion.config import (
    GOAL,
    THEME,
    OutputConfig,
    StatsSourceConfig,
    WatchConfig,
)
from halfbillion.exceptions import StatsError
from halfbillion.models import EstimatorState, eta_seconds, format_eta, refresh_due
from halfbillion.stats import StatsClient
from halfbillion.utils import celebrate

CELEBRATION_MESSAGE = "500 million Symfony downloads reached!"

console = Console(theme=THEME)


class Phase(Enum):
    POLLING = "polling"
    CELEBRATING = "celebrating"


def _verbose(console: Optional[Console], verbose: bool, message: str) -> None:
    if console is not None and verbose:
        console.print(f"[#7F848E]{message}[/#7F848E]", highlight=False)


async def refresh_state(
    now: int,
    state: EstimatorState,
    client: StatsClient,
    console: Optional[Console] = None,
    verbose: bool = False,
) -> bool:
    """
    Replace the state with a fresh snapshot from the stats page.

    Any StatsError is reported at verbose level and swallowed; the state
    is only touched when the whole snapshot was parsed.

    Returns:
        True if the state was updated
    """
    _verbose(console, verbose, f"Refreshing data from {client.url}")
    try:
        snapshot = await client.fetch_snapshot()
    except StatsError as e:
        _verbose(console, verbose, f"⚠ {str(e)}")
        return False

    state.apply(snapshot, now)
    return True


async def tick(
    now: int,
    state: EstimatorState,
    refresh_interval: int = 600,
    client: Optional[StatsClient] = None,
    console: Optional[Console] = None,
    verbose: bool = False,
    goal: int = GOAL,
) -> Tuple[int, str]:
    """Run one estimation step, returning the extrapolated total and the ETA."""
    if client is not None and refresh_due(now, state.last_refresh_at, refresh_interval):
        await refresh_state(now, state, client, console=console, verbose=verbose)

    extrapolated = state.extrapolate(now)
    eta = format_eta(eta_seconds(extrapolated, state.rate, goal))
    return extrapolated, eta


class Watcher:
    def __init__(
        self,
        client: Optional[StatsClient],
        watch_config: WatchConfig,
        output_config: OutputConfig,
        console: Console = console,
        state: Optional[EstimatorState] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_goal: Optional[Callable[[], None]] = None,
    ):
        self._client = client
        self._watch_config = watch_config
        self._output_config = output_config
        self._console = console
        self._clock = clock
        self._sleep = sleep
        self._on_goal = on_goal or (
            lambda: celebrate(self._console, CELEBRATION_MESSAGE)
        )
        self.state = state or EstimatorState()
        self.phase = Phase.POLLING

    def _make_progress(self) -> Progress:
        return Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(complete_style="#98C379", finished_style="#98C379"),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TextColumn("Estimated remaining time 🎉  {task.fields[eta]}"),
            console=self._console,
            expand=True,
        )

    async def run(self) -> bool:
        """
        Poll until the goal is reached, then celebrate once.

        Cancellation (Ctrl-C) propagates without celebrating.

        Returns:
            True once the goal was reached
        """
        goal = self._watch_config.goal
        progress = self._make_progress()

        with progress:
            task = progress.add_task(
                "[#E5C07B]Symfony downloads", total=goal, eta="-"
            )

            while self.phase is Phase.POLLING:
                now = int(self._clock())
                extrapolated, eta = await tick(
                    now,
                    self.state,
                    refresh_interval=self._watch_config.refresh_interval,
                    client=self._client,
                    console=self._console,
                    verbose=self._output_config.verbose,
                    goal=goal,
                )
                progress.update(task, completed=min(extrapolated, goal), eta=eta)

                if extrapolated >= goal:
                    self.phase = Phase.CELEBRATING
                    break

                await self._sleep(self._watch_config.tick_interval)

        self._on_goal()
        return True


async def watch_downloads(
    source_config: StatsSourceConfig,
    watch_config: WatchConfig,
    output_config: OutputConfig,
    console: Console = console,
) -> bool:
    """Watch the Symfony download count until it reaches the goal."""
    client = StatsClient(source_config)
    try:
        watcher = Watcher(client, watch_config, output_config, console=console)
        return await watcher.run()
    finally:
        await client.close()

import asyncio

import typer
from rich.console import Console
from typing_extensions import Annotated

from halfbillion.config import THEME, OutputConfig, StatsSourceConfig, WatchConfig
from halfbillion.watcher import watch_downloads

# Initialize Rich console with custom theme
console = Console(theme=THEME)

app = typer.Typer()


@app.callback()
def main():
    """
    Watch the Symfony download count approach 500 million.
    """


@app.command()
def downloads(
    refresh: Annotated[
        int,
        typer.Option(
            "--refresh", "-r", min=0, help="Data refresh interval in seconds"
        ),
    ] = 600,
    timeout: Annotated[
        int, typer.Option(min=1, help="HTTP timeout for the stats page (seconds)")
    ] = 15,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose output")
    ] = False,
):
    """
    Display the total Symfony downloads progress bar.
    """
    source_config = StatsSourceConfig(timeout=timeout)
    watch_config = WatchConfig(refresh_interval=refresh)
    output_config = OutputConfig(verbose=verbose)

    try:
        asyncio.run(
            watch_downloads(source_config, watch_config, output_config, console=console)
        )
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted, goal not reached yet.[/warning]")
        raise typer.Exit(130)
    except Exception as e:
        console.print(f"[error]Error watching downloads: {str(e)}[/error]")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

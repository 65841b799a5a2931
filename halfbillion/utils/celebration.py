import subprocess
import time
from typing import Callable

from rich.console import Console

BEER = "🍺  "
BEERS = "🍻  "
PARTY_POPPER = "🎉  "
CLAP = "👏  "
CONFETTI = "🎊  "

BELL = "\x07"


def banner_line(repeat: int = 3) -> str:
    return (BEER + PARTY_POPPER + BEERS + CLAP + CONFETTI) * repeat


def announce(message: str, voice: str = "Good News") -> bool:
    """
    Speak the message with the macOS ``say`` command.

    Returns:
        True if ``say`` ran successfully
    """
    try:
        subprocess.run(["say", "-v", voice, message], check=True)
    except (OSError, subprocess.CalledProcessError):
        return False
    return True


def celebrate(
    console: Console,
    message: str,
    speak: Callable[[str], bool] = announce,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Print the celebration banner and make some noise."""
    line = banner_line()
    console.print(f"\n\n{line}\n")
    console.print(f"   [success]{message}[/success] ")
    console.print(f"\n{line}\n")

    if speak(message):
        return

    # No speech available, ring the terminal bell instead
    for _ in range(5):
        console.file.write(BELL)
        console.file.flush()
        sleep(0.5)

from __future__ import annotations

import io

import pytest
from rich.console import Console

from halfbillion.config import THEME


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120, theme=THEME)

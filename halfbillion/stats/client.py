import asyncio
import json
import math
import re
from numbers import Real
from typing import Optional

import aiohttp

from ..config import StatsSourceConfig
from ..exceptions import FetchError, ParseError, SchemaError
from ..models import Snapshot

STATS_PATTERN = re.compile(r"var stats = (.*);")


def _number(value) -> bool:
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def parse_stats(content: str, url: Optional[str] = None) -> Snapshot:
    """
    Extract the stats snapshot embedded in the stats page.

    Args:
        content: HTML of the stats page
        url: Source URL, attached to raised errors

    Returns:
        Snapshot built from ``total.downloads``, ``total.perSecond`` and ``updatedAt``

    Raises:
        ParseError: The ``var stats = ...;`` block is missing or not JSON
        SchemaError: A required field is missing or not a finite number
    """
    match = STATS_PATTERN.search(content)
    if match is None:
        raise ParseError("Could not find stats.", url=url)

    try:
        stats = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise ParseError(f"Could not decode stats: {e}", url=url) from e

    total = stats.get("total") if isinstance(stats, dict) else None
    if not isinstance(total, dict):
        raise SchemaError("Could not find required data.", url=url)

    downloads = total.get("downloads")
    per_second = total.get("perSecond")
    updated_at = stats.get("updatedAt")
    if not all(_number(v) for v in (downloads, per_second, updated_at)):
        raise SchemaError("Could not find required data.", url=url)

    return Snapshot(
        total=int(downloads),
        rate=float(per_second),
        updated_at=int(updated_at),
    )


class StatsClient:
    def __init__(self, config: StatsSourceConfig):
        self._config = config
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def url(self) -> str:
        return self._config.url

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def fetch_page(self) -> str:
        """Download the stats page; transport problems raise FetchError, undecodable bodies ParseError."""
        session = await self._get_session()
        try:
            async with session.get(self.url) as response:
                if response.status != 200:
                    raise FetchError(
                        f"Could not download stats page: HTTP {response.status}",
                        url=self.url,
                        status_code=response.status,
                    )
                return await response.text()
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Could not decode stats page: {str(e)}", url=self.url
            ) from e
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise FetchError("Timed out downloading stats page.", url=self.url) from e
        except aiohttp.ClientError as e:
            raise FetchError(
                f"Could not download stats page: {str(e)}", url=self.url
            ) from e

    async def fetch_snapshot(self) -> Snapshot:
        content = await self.fetch_page()
        return parse_stats(content, url=self.url)

    async def close(self) -> None:
        """Close the client's resources."""
        if self._session:
            await self._session.close()
            self._session = None

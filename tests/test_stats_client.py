from __future__ import annotations

import asyncio

import aiohttp
import pytest

from halfbillion.config import StatsSourceConfig
from halfbillion.exceptions import FetchError, ParseError, SchemaError, StatsError
from halfbillion.models import EstimatorState, Snapshot
from halfbillion.stats import StatsClient, parse_stats
from halfbillion.watcher import tick

PAGE = """
<html><body>
<script>
    var stats = {"total": {"downloads": 497123456, "perSecond": 13.5}, "updatedAt": 1475000000};
</script>
</body></html>
"""


class _FakeResponse:
    def __init__(self, status: int, body: str, error: Exception | None = None) -> None:
        self.status = status
        self._body = body
        self._error = error

    async def __aenter__(self) -> "_FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def text(self) -> str:
        if self._error is not None:
            raise self._error
        return self._body


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: BaseException | None = None) -> None:
        self._response = response
        self._error = error
        self.requested: list[str] = []
        self.closed = False

    def get(self, url: str) -> _FakeResponse:
        self.requested.append(url)
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response

    async def close(self) -> None:
        self.closed = True


def _client_with(session: _FakeSession) -> StatsClient:
    client = StatsClient(StatsSourceConfig())
    client._session = session  # type: ignore[assignment]
    return client


def test_parse_stats_reads_embedded_block() -> None:
    assert parse_stats(PAGE) == Snapshot(total=497123456, rate=13.5, updated_at=1475000000)


def test_parse_stats_accepts_integer_rate() -> None:
    snapshot = parse_stats('var stats = {"total": {"downloads": 10, "perSecond": 2}, "updatedAt": 5};')

    assert snapshot.rate == 2.0
    assert isinstance(snapshot.rate, float)


def test_parse_stats_without_block_raises_parse_error() -> None:
    with pytest.raises(ParseError, match="Could not find stats"):
        parse_stats("<html>maintenance</html>", url="https://example.test")


def test_parse_stats_with_broken_json_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_stats('var stats = {"total": {"downloads": ;')


@pytest.mark.parametrize(
    "payload",
    [
        '{"total": {"perSecond": 1.0}, "updatedAt": 1}',
        '{"total": {"downloads": 1}, "updatedAt": 1}',
        '{"total": {"downloads": 1, "perSecond": 1.0}}',
        '{"total": 5, "updatedAt": 1}',
        '{"total": {"downloads": "many", "perSecond": 1.0}, "updatedAt": 1}',
        '{"total": {"downloads": 1, "perSecond": true}, "updatedAt": 1}',
        "[1, 2, 3]",
        '{"total": {"downloads": NaN, "perSecond": 1.0}, "updatedAt": 1}',
        '{"total": {"downloads": 1, "perSecond": NaN}, "updatedAt": 1}',
        '{"total": {"downloads": 1, "perSecond": 1.0}, "updatedAt": Infinity}',
        '{"total": {"downloads": -Infinity, "perSecond": 1.0}, "updatedAt": 1}',
        '{"total": {"downloads": 1, "perSecond": 1e400}, "updatedAt": 1}',
    ],
)
def test_parse_stats_with_missing_fields_raises_schema_error(payload: str) -> None:
    with pytest.raises(SchemaError) as excinfo:
        parse_stats(f"var stats = {payload};", url="https://example.test")

    assert excinfo.value.url == "https://example.test"


@pytest.mark.asyncio
async def test_fetch_snapshot_parses_page() -> None:
    session = _FakeSession(_FakeResponse(200, PAGE))
    client = _client_with(session)

    snapshot = await client.fetch_snapshot()

    assert snapshot.total == 497123456
    assert session.requested == ["https://symfony.com/500million"]


@pytest.mark.asyncio
async def test_fetch_page_non_200_raises_fetch_error() -> None:
    client = _client_with(_FakeSession(_FakeResponse(503, "down")))

    with pytest.raises(FetchError) as excinfo:
        await client.fetch_page()

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_fetch_page_transport_failure_raises_fetch_error(error: BaseException) -> None:
    client = _client_with(_FakeSession(error=error))

    with pytest.raises(FetchError) as excinfo:
        await client.fetch_page()

    assert isinstance(excinfo.value, StatsError)
    assert excinfo.value.url == client.url


@pytest.mark.asyncio
async def test_close_releases_session() -> None:
    session = _FakeSession(_FakeResponse(200, PAGE))
    client = _client_with(session)

    await client.close()
    await client.close()

    assert session.closed
    assert client._session is None


@pytest.mark.asyncio
async def test_fetch_page_undecodable_body_raises_parse_error() -> None:
    error = UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
    client = _client_with(_FakeSession(_FakeResponse(200, "", error=error)))

    with pytest.raises(ParseError, match="Could not decode stats page"):
        await client.fetch_page()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(200, 'var stats = {"total": {"downloads": NaN, "perSecond": 1.0}, "updatedAt": 1};'),
        _FakeResponse(200, 'var stats = {"total": {"downloads": 1, "perSecond": NaN}, "updatedAt": 1};'),
        _FakeResponse(200, 'var stats = {"total": {"downloads": 1, "perSecond": 1.0}, "updatedAt": Infinity};'),
        _FakeResponse(200, "", error=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")),
        _FakeResponse(200, "<html>no stats here</html>"),
        _FakeResponse(500, "oops"),
    ],
)
async def test_tick_with_bad_page_keeps_state(response: _FakeResponse) -> None:
    now = 1475000040  # minute boundary
    client = _client_with(_FakeSession(response))
    state = EstimatorState()
    before = EstimatorState(**vars(state))

    extrapolated, eta = await tick(now, state, refresh_interval=600, client=client)

    assert state == before
    assert extrapolated == before.extrapolate(now)
    assert eta

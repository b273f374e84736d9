"""
PLN -> EUR exchange rate: provider fallback, Redis caching and the endpoint.

Upstream providers are replaced by ``httpx.MockTransport``; Redis by a
dict-backed stand-in.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
import redis.asyncio as aioredis
from httpx import ASGITransport, AsyncClient

from airport_taxi.config import settings
from airport_taxi.infrastructure.exchange_rates import CACHE_KEY, eur_rate, fetch_eur_rate

PRIMARY = "https://rates-one.example/latest"
SECONDARY = "https://rates-two.example/latest"


class DictRedis:
    def __init__(self, broken: bool = False):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.broken = broken

    async def get(self, key):
        if self.broken:
            raise aioredis.ConnectionError("redis down")
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        if self.broken:
            raise aioredis.ConnectionError("redis down")
        self.data[key] = value
        self.ttls[key] = ex


def provider(responses: dict[str, httpx.Response], calls: list[str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        calls.append(url)
        answer = responses.get(url)
        if answer is None:
            raise httpx.ConnectError("unreachable", request=request)
        return answer

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def rate_urls(monkeypatch):
    monkeypatch.setattr(settings, "exchange_rate_urls", [PRIMARY, SECONDARY])
    return [PRIMARY, SECONDARY]


# ── Provider fallback ─────────────────────────────────────────────────


class TestFetch:
    @pytest.mark.asyncio
    async def test_first_provider_wins(self):
        calls = []
        client = provider({PRIMARY: httpx.Response(200, json={"rates": {"EUR": 0.231}})}, calls)
        async with client:
            assert await fetch_eur_rate(client, [PRIMARY, SECONDARY]) == 0.231
        assert calls == [PRIMARY]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        [
            httpx.Response(500),
            httpx.Response(200, json={"rates": {}}),
            httpx.Response(200, json={"rates": {"EUR": "n/a"}}),
            httpx.Response(200, text="<html>maintenance</html>"),
            None,
        ],
    )
    async def test_falls_back_to_second_provider(self, failure):
        responses = {SECONDARY: httpx.Response(200, json={"rates": {"EUR": "0.2305"}})}
        if failure is not None:
            responses[PRIMARY] = failure
        calls = []
        async with provider(responses, calls) as client:
            assert await fetch_eur_rate(client, [PRIMARY, SECONDARY]) == 0.2305
        assert calls == [PRIMARY, SECONDARY]

    @pytest.mark.asyncio
    async def test_all_providers_down(self):
        async with provider({}, []) as client:
            assert await fetch_eur_rate(client, [PRIMARY, SECONDARY]) is None


# ── Caching ───────────────────────────────────────────────────────────


class TestCache:
    @pytest.mark.asyncio
    async def test_rate_is_cached_for_six_hours(self, rate_urls):
        redis = DictRedis()
        calls = []
        async with provider({PRIMARY: httpx.Response(200, json={"rates": {"EUR": 0.23}})}, calls) as client:
            first = await eur_rate(redis, client)
            second = await eur_rate(redis, client)

        assert first == second == 0.23
        assert calls == [PRIMARY]
        assert redis.ttls[CACHE_KEY] == 6 * 60 * 60

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, rate_urls):
        redis = DictRedis()
        async with provider({}, []) as client:
            assert await eur_rate(redis, client) is None
        assert CACHE_KEY not in redis.data

    @pytest.mark.asyncio
    async def test_works_without_redis(self, rate_urls):
        async with provider({PRIMARY: httpx.Response(200, json={"rates": {"EUR": 0.23}})}, []) as client:
            assert await eur_rate(DictRedis(broken=True), client) == 0.23


# ── Endpoint ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def rate_client(rate_urls):
    from airport_taxi.api.app import create_app
    from airport_taxi.api.dependencies import get_http_client
    from airport_taxi.api.middleware import limiter
    from airport_taxi.infrastructure.redis_client import get_redis

    answers: dict[str, httpx.Response] = {}
    redis = DictRedis()

    async def _http():
        async with provider(answers, []) as client:
            yield client

    limiter.reset()
    app = create_app()
    app.dependency_overrides[get_redis] = lambda: redis
    app.dependency_overrides[get_http_client] = _http

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac, answers


class TestEndpoint:
    @pytest.mark.asyncio
    async def test_returns_rate(self, rate_client):
        client, answers = rate_client
        answers[SECONDARY] = httpx.Response(200, json={"rates": {"EUR": 0.2299}})

        resp = await client.get("/api/v1/eur-rate")

        assert resp.status_code == 200
        assert resp.json() == {
            "rate": 0.2299,
            "base": "PLN",
            "target": "EUR",
            "cachedForSeconds": 21600,
        }

    @pytest.mark.asyncio
    async def test_503_when_no_provider_answers(self, rate_client):
        client, _ = rate_client
        resp = await client.get("/api/v1/eur-rate")
        assert resp.status_code == 503
        assert resp.json() == {"rate": None}

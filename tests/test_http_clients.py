"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from nutrition_validator.adapters.fdc_client import HttpxFdcClient
from nutrition_validator.config import ConfigurationError


def test_fdc_client_search_and_get() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/foods/search"):
            return httpx.Response(200, json={"foods": []})
        return httpx.Response(200, json={"fdcId": 1, "foodNutrients": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=async_client,
    )

    search = asyncio.run(
        client.search_foods("rice", page_size=5, data_types=["SR Legacy"])
    )
    food = asyncio.run(client.get_food(1))

    assert search == {"foods": []}
    assert food["fdcId"] == 1
    search_request, food_request = seen
    assert search_request.method == "POST"
    assert search_request.url.params["api_key"] == "key"
    assert json.loads(search_request.content.decode()) == {
        "query": "rice",
        "pageSize": 5,
        "dataType": ["SR Legacy"],
    }
    assert food_request.method == "GET"
    assert food_request.url.path == "/food/1"


def test_fdc_client_omits_empty_data_types() -> None:
    payloads: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"foods": []})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxFdcClient(
        api_key="key", base_url="https://api.test", http_client=async_client
    )

    asyncio.run(client.search_foods("oats"))

    assert payloads == [{"query": "oats", "pageSize": 10}]


def test_fdc_client_raises_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxFdcClient(
        api_key="key", base_url="https://api.test", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_food(1))


def test_fdc_client_requires_api_key() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxFdcClient(
        api_key=None, base_url="https://api.test", http_client=async_client
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(client.search_foods("rice"))
    with pytest.raises(ConfigurationError):
        asyncio.run(client.get_food(1))
    assert calls == []

import asyncio

import pytest

from netmanager import HttpClient, RequestOptions


class DummyResponse:
    def __init__(self, data):
        self._data = data

    async def json(self):
        return self._data

    async def text(self):
        return str(self._data)


class StaticTransport:
    def __init__(self, data):
        self.data = data

    async def request(self, url, options, controller):
        return DummyResponse(self.data)


def test_identity_hook_by_default():
    client = HttpClient(transport=StaticTransport({"v": 1}))
    assert asyncio.run(client.get("/x")) == {"v": 1}


def test_non_callable_hook_falls_back_to_identity():
    client = HttpClient(transport=StaticTransport({"v": 1}), on_received="nope")
    assert asyncio.run(client.get("/x")) == {"v": 1}


def test_client_hook_result_is_returned():
    calls = []

    def hook(body, options):
        calls.append((body, options.method, options.url))
        return body["data"]

    client = HttpClient(host="http://api.test", transport=StaticTransport({"data": [1, 2]}), on_received=hook)
    assert asyncio.run(client.get("/list")) == [1, 2]
    assert calls == [({"data": [1, 2]}, "GET", "http://api.test/list?")]


def test_async_hook_is_awaited():
    async def hook(body, options):
        await asyncio.sleep(0)
        return {"wrapped": body}

    client = HttpClient(transport=StaticTransport(3), on_received=hook)
    assert asyncio.run(client.post("/x")) == {"wrapped": 3}


def test_per_request_hook_wins():
    client = HttpClient(transport=StaticTransport(5), on_received=lambda b, o: "client")
    assert asyncio.run(client.get("/x", on_received=lambda b, o: b * 2)) == 10
    assert asyncio.run(client.get("/x")) == "client"


def test_hook_runs_once_per_request():
    count = {"n": 0}

    def hook(body, options):
        count["n"] += 1
        return body

    client = HttpClient(transport=StaticTransport(1), on_received=hook)

    async def go():
        await client.get("/a")
        await client.post("/b")

    asyncio.run(go())
    assert count["n"] == 2


def test_hook_error_propagates():
    def hook(body, options):
        raise KeyError("code")

    client = HttpClient(transport=StaticTransport({}), on_received=hook)
    with pytest.raises(KeyError):
        asyncio.run(client.get("/x"))


def test_on_received_direct_call_without_options():
    client = HttpClient(transport=StaticTransport(None), on_received=lambda b, o: (b, isinstance(o, RequestOptions)))
    assert asyncio.run(client.on_received("body")) == ("body", True)

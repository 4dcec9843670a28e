import json
import logging

import pytest

from netmanager import cli
from netmanager import errors
from netmanager.cli import common
from netmanager.cli import request as request_cmds
from netmanager.cli import reachability as reach_cmds
from netmanager.errors import ErrorStrings, RequestTimeoutError


class FakeClient:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    async def _answer(self, name, endpoint, kwargs):
        self.calls.append((name, endpoint, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.result

    async def get(self, endpoint, **kwargs):
        return await self._answer("get", endpoint, kwargs)

    async def post(self, endpoint, **kwargs):
        return await self._answer("post", endpoint, kwargs)

    async def upload(self, endpoint, **kwargs):
        return await self._answer("upload", endpoint, kwargs)


def test_parse_pairs_keeps_order_and_splits_once():
    assert common.parse_pairs(["b=2", "a=x=y"]) == {"b": "2", "a": "x=y"}
    assert common.parse_pairs(None) == {}
    with pytest.raises(ValueError):
        common.parse_pairs(["novalue"])


def test_parse_file_arg():
    spec = common.parse_file_arg("photo=file:///tmp/a.jpg:image/jpeg")
    assert (spec.name, spec.file, spec.filename, spec.type) == ("photo", "file:///tmp/a.jpg", "a.jpg", "image/jpeg")

    spec = common.parse_file_arg("doc=/tmp/d.pdf")
    assert (spec.file, spec.filename, spec.type) == ("/tmp/d.pdf", "d.pdf", None)

    spec = common.parse_file_arg("doc=file:///tmp/d.pdf")
    assert (spec.file, spec.type) == ("file:///tmp/d.pdf", None)


def test_get_command_prints_json(monkeypatch, capsys):
    fake = FakeClient(result={"items": [1]})
    monkeypatch.setattr(request_cmds, "get_client", lambda args: fake)

    status = cli.run(["get", "/items", "--param", "a=1", "--param", "b=x y", "--no-cache"])

    assert status == 0
    name, endpoint, kwargs = fake.calls[0]
    assert (name, endpoint) == ("get", "/items")
    assert kwargs["params"] == {"a": "1", "b": "x y"}
    assert kwargs["use_cache"] is False
    assert kwargs["content_type"] is None
    assert json.loads(capsys.readouterr().out) == {"items": [1]}


def test_post_command_text_output(monkeypatch, capsys):
    fake = FakeClient(result="done")
    monkeypatch.setattr(request_cmds, "get_client", lambda args: fake)

    status = cli.run(["post", "/login", "--field", "user=me", "--no-cookie", "--text"])

    assert status == 0
    kwargs = fake.calls[0][2]
    assert kwargs["form_data"] == {"user": "me"}
    assert kwargs["use_cookie"] is False
    assert kwargs["headers"] is None
    assert kwargs["content_type"] == "TEXT"
    assert capsys.readouterr().out == "done\n"


def test_upload_command_passes_files(monkeypatch, capsys):
    fake = FakeClient(result={"ok": True})
    monkeypatch.setattr(request_cmds, "get_client", lambda args: fake)

    status = cli.run(["upload", "/up", "--file", "photo=/tmp/p.png:image/png", "--field", "t=1"])

    assert status == 0
    kwargs = fake.calls[0][2]
    assert [f.name for f in kwargs["files"]] == ["photo"]
    assert kwargs["files"][0].type == "image/png"
    assert kwargs["form_data"] == {"t": "1"}


def test_timeout_reports_error_string(monkeypatch, caplog):
    monkeypatch.setattr(errors, "error_strings", ErrorStrings())
    # the CLI module holds its own reference to the shared table
    monkeypatch.setattr(cli, "error_strings", errors.error_strings)
    fake = FakeClient(exc=RequestTimeoutError(url="http://x", timeout=1))
    monkeypatch.setattr(request_cmds, "get_client", lambda args: fake)

    with caplog.at_level(logging.ERROR, logger="netmanager.cli"):
        status = cli.run(["get", "/slow", "--error-string", "err_api_timeout=Server took too long"])

    assert status == 1
    assert "Server took too long" in caplog.text


def test_get_client_uses_host_and_timeout():
    class Args:
        host = "http://api.test"
        timeout = 1500

    client = common.get_client(Args())
    assert client.host == "http://api.test"
    assert client.timeout == 1500


def test_no_command_prints_help(capsys):
    assert cli.run([]) == 0
    assert "netmanager" in capsys.readouterr().out


def test_reachability_command_probes_once(monkeypatch, capsys):
    class FakeProvider:
        def __init__(self, probe_url=None, interval=None):
            self.probe_url = probe_url
            self.closed = False

        async def current_state(self):
            return {"type": "wifi"}

        def subscribe(self, event, handler):
            return lambda: None

        def close(self):
            self.closed = True

    monkeypatch.setattr(reach_cmds, "PollingConnectivityProvider", FakeProvider)

    assert cli.run(["reachability", "--probe-url", "http://probe.test/"]) == 0
    assert capsys.readouterr().out.strip() == "WIFI"


def test_reachability_watch_prints_changes(monkeypatch, capsys):
    class FakeProvider:
        def __init__(self, probe_url=None, interval=None):
            pass

        async def current_state(self):
            return {"type": "cellular"}

        def subscribe(self, event, handler):
            handler({"type": "cellular"})
            handler({"type": "none"})
            return lambda: None

        def close(self):
            pass

    monkeypatch.setattr(reach_cmds, "PollingConnectivityProvider", FakeProvider)

    assert cli.run(["reachability", "--watch", "0.01"]) == 0
    assert capsys.readouterr().out.split() == ["CELLULAR", "NONE"]

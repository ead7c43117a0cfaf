# -*- coding: utf-8 -*-
"""Location: ./tests/unit/pushgateway/routers/test_webhook_router.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Tests for ``POST /v1/webhook/{name}``.
"""

# Third-Party
from fastapi.testclient import TestClient
import pytest

# First-Party
from pushgateway.main import create_app
from pushgateway.webhooks import WebhookManager


@pytest.fixture
def make_client(plugin_dir, test_settings, account_service):
    clients = []

    def _make(webhooks) -> TestClient:
        manager = WebhookManager(webhooks=webhooks, webhook_root=plugin_dir / "webhook", max_workers=4)
        client = TestClient(create_app(webhook_manager=manager, account_service=account_service, config=test_settings))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


def test_github_webhook(make_client, write_script, github_script):
    write_script("github.lua", github_script)
    client = make_client([{"name": "github", "file": "github.lua", "env": {"x": "123", "y": 456}}])

    response = client.post("/v1/webhook/github?abc=123")

    assert response.status_code == 201
    assert response.text == "123"
    assert response.headers["content-type"] == "text/plain; charset=utf-8"


def test_unknown_webhook(make_client):
    client = make_client([])
    response = client.post("/v1/webhook/test")
    assert response.status_code == 404
    assert response.json() == {"res": 404, "msg": "webhook not found"}


def test_name_is_case_sensitive(make_client):
    client = make_client([{"name": "github", "script": "return 204"}])
    assert client.post("/v1/webhook/GitHub").status_code == 404


def test_failing_script(make_client, write_script):
    write_script("github.lua", "a()")
    client = make_client([{"name": "github", "file": "github.lua"}])

    response = client.post("/v1/webhook/github", content=b"{}")

    assert response.status_code == 400
    assert response.json() == {"res": 400, "msg": "webhook execution failed"}


def test_failure_does_not_affect_other_plugins(make_client, write_script):
    write_script("broken.lua", "a()")
    client = make_client([{"name": "broken", "file": "broken.lua"}, {"name": "ok", "script": 'return 200, "fine"'}])

    assert client.post("/v1/webhook/broken").status_code == 400
    response = client.post("/v1/webhook/ok")
    assert (response.status_code, response.text) == (200, "fine")


@pytest.mark.parametrize("file", ["", "missing.lua"])
def test_unloadable_script(make_client, file):
    client = make_client([{"name": "github", "file": file}])
    assert client.post("/v1/webhook/github").status_code == 400


def test_compile_error_then_fixed(make_client, write_script):
    path = write_script("late.lua", "return 201,")
    client = make_client([{"name": "late", "file": "late.lua"}])
    assert client.post("/v1/webhook/late").status_code == 400

    path.write_text('return 202, "ok"', encoding="utf-8")
    response = client.post("/v1/webhook/late")
    assert (response.status_code, response.text) == (202, "ok")


def test_exact_content_type(make_client):
    client = make_client([{"name": "json", "script": 'return 201, "application/json", "{\\"ok\\":true}"'}])
    response = client.post("/v1/webhook/json")
    assert response.status_code == 201
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"ok": True}


@pytest.mark.parametrize(
    "script,status,body",
    [
        ("", 200, ""),
        ("return 401", 401, ""),
        ('return "abc"', 200, ""),
        ('return 201, "abc"', 201, "abc"),
        ("return 999, 12", 200, "12"),
        ("return 200, 1.5", 200, "1.5"),
    ],
)
def test_return_conventions(make_client, script, status, body):
    client = make_client([{"name": "hook", "script": script}])
    response = client.post("/v1/webhook/hook")
    assert (response.status_code, response.text) == (status, body)


def test_request_is_visible_to_script(make_client):
    script = 'local req = ctx:request()\nreturn 200, req:token() .. "|" .. req:header("X-Event") .. "|" .. req:body() .. "|" .. req:url()'
    client = make_client([{"name": "echo", "script": script}])

    response = client.post("/v1/webhook/echo?a=1", content=b"payload", headers={"Authorization": "Bearer t0k", "X-Event": "push"})

    assert response.text == "t0k|push|payload|/v1/webhook/echo?a=1"


def test_binary_body_is_echoed(make_client):
    client = make_client([{"name": "echo", "script": 'return 200, "application/octet-stream", ctx:request():body()'}])
    response = client.post("/v1/webhook/echo", content=b"\xff\xfe\x00raw")
    assert response.status_code == 200
    assert response.content == b"\xff\xfe\x00raw"


@pytest.mark.parametrize("content_type", ["text/plain; name=\\u{263A}", "text/plain\\r\\nX-Injected: 1"])
def test_unsendable_content_type_uses_default(make_client, content_type):
    client = make_client([{"name": "hook", "script": f'return 200, "{content_type}", "x"'}])
    response = client.post("/v1/webhook/hook")
    assert (response.status_code, response.text) == (200, "x")
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert "x-injected" not in response.headers


def test_no_content_status_has_empty_body(make_client):
    client = make_client([{"name": "quiet", "script": 'return 204, "ignored"'}])
    response = client.post("/v1/webhook/quiet")
    assert response.status_code == 204
    assert response.content == b""


def test_only_post_is_routed(make_client):
    client = make_client([{"name": "hook", "script": "return 200"}])
    assert client.get("/v1/webhook/hook").status_code == 405


def test_health_counts_webhooks(make_client):
    client = make_client([{"name": "a", "script": "return 200"}, {"name": "b", "script": "return 200"}])
    assert client.get("/health").json() == {"status": "healthy", "webhooks": 2}

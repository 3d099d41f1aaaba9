from __future__ import annotations

from typing import Any

import pytest
import requests

from swarmboard.config import UNCONFIGURED_API_URL, Settings
from swarmboard.errors import ApiError, NotConfiguredError
from swarmboard.identity import get_hostname
from swarmboard.items import ItemsClient, resolve_base_url


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or ("" if payload is None else repr(payload))
        self.content = self.text.encode()

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, headers=None, json=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses: Any, url: str = "https://api.example.test/prod") -> tuple[ItemsClient, FakeSession]:
    session = FakeSession(*responses)
    return ItemsClient(Settings(api_gateway_url=url), session=session), session


def test_call_api_sends_json_and_identity() -> None:
    client, session = _client(FakeResponse(201, {"id": "1", "name": "box"}))

    item = client.create_item({"name": "box"})

    assert item == {"id": "1", "name": "box"}
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.example.test/prod/items"
    assert call["json"] == {"name": "box"}
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["User-Agent"] == f"swarmboard/{get_hostname()}"


def test_item_paths() -> None:
    client, session = _client(FakeResponse(200, []), FakeResponse(200, {}), FakeResponse(200, {}))

    client.list_items()
    client.get_item("7")
    client.update_item("7", {"name": "new"})

    assert [(c["method"], c["url"].rsplit("/prod", 1)[1]) for c in session.calls] == [
        ("GET", "/items"),
        ("GET", "/items/7"),
        ("PUT", "/items/7"),
    ]


def test_non_2xx_raises_api_error() -> None:
    client, _ = _client(FakeResponse(404, text="Item not found"))

    with pytest.raises(ApiError) as exc:
        client.get_item("missing")

    assert exc.value.status == 404
    assert exc.value.text == "Item not found"
    assert exc.value.to_dict()["upstream_status"] == 404


def test_non_json_success_is_api_error() -> None:
    client, _ = _client(FakeResponse(200, ValueError("Expecting value"), text="<html>gateway</html>"))

    with pytest.raises(ApiError) as exc:
        client.list_items()

    assert exc.value.status == 200
    assert exc.value.text == "<html>gateway</html>"


def test_no_content_returns_none() -> None:
    client, _ = _client(FakeResponse(204))

    assert client.delete_item("7") is None


def test_connection_failure_is_api_error() -> None:
    client, _ = _client(requests.ConnectionError("refused"))

    with pytest.raises(ApiError) as exc:
        client.list_items()

    assert exc.value.status is None


def test_unconfigured_client_fails_fast() -> None:
    session = FakeSession()
    client = ItemsClient(Settings(), session=session, lookup=lambda name, region: None)

    with pytest.raises(NotConfiguredError):
        client.list_items()

    assert session.calls == []


def test_env_url_wins_over_parameter_store() -> None:
    def lookup(name: str, region: str) -> str:
        raise AssertionError("should not be called")

    settings = Settings(api_gateway_url="https://env.example/", api_gateway_param="/app/url")

    assert resolve_base_url(settings, lookup) == "https://env.example"


def test_parameter_store_url_is_resolved_once() -> None:
    seen: list[tuple[str, str]] = []

    def lookup(name: str, region: str) -> str:
        seen.append((name, region))
        return "https://ssm.example/prod"

    settings = Settings(api_gateway_param="/app/url", aws_region="eu-north-1")
    client = ItemsClient(settings, session=FakeSession(), lookup=lookup)

    assert client.base_url == "https://ssm.example/prod"
    assert client.base_url == "https://ssm.example/prod"
    assert seen == [("/app/url", "eu-north-1")]


def test_missing_parameter_falls_back_to_sentinel() -> None:
    settings = Settings(api_gateway_param="/app/url")

    assert resolve_base_url(settings, lambda name, region: None) == UNCONFIGURED_API_URL


# ---------- HTTP routes ----------


def _install(app, *responses: Any) -> FakeSession:
    session = FakeSession(*responses)
    app.extensions["swarmboard_items"].session = session
    return session


def test_items_routes_proxy_upstream(app, client) -> None:
    session = _install(
        app,
        FakeResponse(200, [{"id": "1", "name": "box"}]),
        FakeResponse(200, {"id": "1", "name": "crate"}),
        FakeResponse(204),
    )

    assert client.get("/api/items").get_json() == [{"id": "1", "name": "box"}]
    assert client.put("/api/items/1", json={"name": "crate"}).get_json()["name"] == "crate"
    deleted = client.delete("/api/items/1")

    assert deleted.status_code == 200
    assert deleted.get_json() == {"success": True, "deleted_id": "1"}
    assert [c["method"] for c in session.calls] == ["GET", "PUT", "DELETE"]


def test_items_route_reports_upstream_error(app, client) -> None:
    _install(app, FakeResponse(500, text="dynamo exploded"))

    res = client.post("/api/items", json={"name": "box"})

    assert res.status_code == 500
    body = res.get_json()
    assert body["error"] == "upstream_error"
    assert body["upstream_status"] == 500
    assert "dynamo exploded" in body["message"]


def test_items_route_non_json_upstream_is_json_error(app, client) -> None:
    _install(app, FakeResponse(200, ValueError("Expecting value"), text="<html>gateway</html>"))

    res = client.get("/api/items")

    assert res.status_code == 500
    body = res.get_json()
    assert body["error"] == "upstream_error"
    assert body["upstream_body"] == "<html>gateway</html>"


def test_items_route_unconfigured(settings, make_app) -> None:
    settings.api_gateway_url = ""
    res = make_app(settings).test_client().get("/api/items")

    assert res.status_code == 503
    assert res.get_json()["error"] == "not_configured"


def test_items_routes_absent_when_disabled(settings, make_app) -> None:
    settings.items_enabled = False
    client = make_app(settings).test_client()

    assert client.get("/api/items").status_code == 404
    assert client.get("/api/config").get_json()["itemsEnabled"] is False

# ReqresSync test scripts
from __future__ import annotations

import io

import pytest
import requests
import responses
from responses import matchers

from _logging import Logger
from providers.sync import _mod_REQRES
from providers.sync._mod_REQRES import ReqresSource
from rs_platform.errors import ExhaustedRetries, TransportError, UnsuccessfulResponse
from rs_platform.repository import fetch_page_with_retry

BASE = "https://reqres.test"
URL = f"{BASE}/api/users"


def _body(page: int, ids: list[int], total_pages: int = 2) -> dict:
    return {
        "page": page,
        "per_page": 6,
        "total": 12,
        "total_pages": total_pages,
        "data": [
            {
                "id": i,
                "email": f"u{i}@reqres.in",
                "first_name": f"F{i}",
                "last_name": f"L{i}",
                "avatar": f"https://reqres.in/img/faces/{i}-image.jpg",
            }
            for i in ids
        ],
        "support": {"url": "https://reqres.in/#support-heading", "text": "Keep Reqres free"},
    }


@responses.activate
def test_get_users_parses_page_and_metadata() -> None:
    responses.add(
        responses.GET,
        URL,
        json=_body(2, [7, 8, 9]),
        status=200,
        match=[matchers.query_param_matcher({"page": "2"})],
    )
    res = ReqresSource(BASE).get_users(2)
    assert [u.id for u in res.records] == [7, 8, 9]
    assert res.records[0].email == "u7@reqres.in"
    assert (res.page, res.per_page, res.total, res.total_pages) == (2, 6, 12, 2)
    assert res.support is not None and res.support.text == "Keep Reqres free"
    assert not res.has_next


@responses.activate
def test_api_key_header_is_sent_when_configured() -> None:
    responses.add(
        responses.GET,
        URL,
        json=_body(1, [1]),
        match=[matchers.header_matcher({"x-api-key": "secret"})],
    )
    assert len(ReqresSource(BASE, api_key="secret").get_users(1).records) == 1


@responses.activate
def test_non_2xx_is_unsuccessful_response() -> None:
    responses.add(responses.GET, URL, json={}, status=503)
    with pytest.raises(UnsuccessfulResponse) as ei:
        ReqresSource(BASE).get_users(1)
    assert ei.value.status == 503


@pytest.mark.parametrize("body", ["", "not json", '{"page": 1}', '{"data": [{"email": "no-id"}]}'])
@responses.activate
def test_empty_or_malformed_body_is_unsuccessful_response(body: str) -> None:
    responses.add(responses.GET, URL, body=body, status=200, content_type="application/json")
    with pytest.raises(UnsuccessfulResponse):
        ReqresSource(BASE).get_users(1)


@responses.activate
def test_connection_failure_is_transport_error() -> None:
    responses.add(responses.GET, URL, body=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(TransportError):
        ReqresSource(BASE).get_users(1)


@responses.activate
def test_retry_over_http_recovers_after_server_errors() -> None:
    responses.add(responses.GET, URL, json={}, status=500)
    responses.add(responses.GET, URL, body=requests.exceptions.ConnectTimeout("slow"))
    responses.add(responses.GET, URL, json=_body(1, [1, 2]), status=200)

    users = fetch_page_with_retry(ReqresSource(BASE), 1, 3, delay=0)

    assert [u.id for u in users] == [1, 2]
    assert len(responses.calls) == 3


@responses.activate
def test_retry_over_http_gives_up() -> None:
    responses.add(responses.GET, URL, json={}, status=404)
    with pytest.raises(ExhaustedRetries) as ei:
        fetch_page_with_retry(ReqresSource(BASE), 1, 1, delay=0)
    assert len(responses.calls) == 2
    assert ei.value.message == "API call failed after 2 attempts."


@responses.activate
def test_api_hits_default_to_the_reqres_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    buf = io.StringIO()
    monkeypatch.setattr(_mod_REQRES, "host_log", Logger(stream=buf, level="debug", use_color=False, show_time=False))
    responses.add(responses.GET, URL, json=_body(1, [1], total_pages=1))

    cfg = {"reqres": {"base_url": BASE}, "runtime": {"api_hits": True}}
    _mod_REQRES.from_config(cfg).get_users(1)

    assert "[REQRES] DEBUG api:hit REQRES users:index" in buf.getvalue().splitlines()


@responses.activate
def test_api_hits_off_emits_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RS_API_HITS", raising=False)
    responses.add(responses.GET, URL, json=_body(1, [1], total_pages=1))
    events: list[str] = []

    cfg = {"reqres": {"base_url": BASE}, "runtime": {"api_hits": False}}
    _mod_REQRES.from_config(cfg, ctx=lambda event, **_: events.append(event)).get_users(1)

    assert events == []

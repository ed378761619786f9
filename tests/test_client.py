from __future__ import annotations

import base64
import json

import httpx
import pytest

from benchgate.config import ApiConfig
from benchgate.models.sessions import SessionQuery
from benchgate.sessions.client import GameBenchClient, SessionFetchError


class RecordingTransport:
    def __init__(self, status_code: int = 200, payload: object | None = None) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


def _client(
    transport: RecordingTransport,
    *,
    company_id: str | None = "acme",
) -> GameBenchClient:
    api = ApiConfig(
        base_url="https://gb.test",
        username="qa@example.com",
        token="secret",
        company_id=company_id,
    )
    return GameBenchClient.from_config(api, transport=httpx.MockTransport(transport))


class TestSearchSessions:
    def test_request_shape(self) -> None:
        transport = RecordingTransport(
            payload={
                "content": [{"id": "s1"}, {"id": "s2"}],
                "totalElements": 40,
                "totalPages": 20,
                "size": 2,
                "number": 3,
            }
        )
        client = _client(transport)

        page = client.search_sessions(
            SessionQuery(page=3, page_size=2, apps=["com.example.racer"], devices=["Pixel 8"])
        )

        [request] = transport.requests
        assert request.method == "POST"
        assert request.url.path == "/v1/sessions"
        assert request.url.params["company"] == "acme"
        assert request.url.params["pageSize"] == "2"
        assert request.url.params["page"] == "3"
        assert request.url.params["sort"] == "timePushed:desc"
        assert json.loads(request.content) == {
            "apps": ["com.example.racer"],
            "devices": ["Pixel 8"],
            "manufacturers": [],
        }
        expected_auth = base64.b64encode(b"qa@example.com:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"

        assert [session["id"] for session in page.content] == ["s1", "s2"]
        assert (page.total_elements, page.total_pages, page.size, page.number) == (40, 20, 2, 3)

    def test_company_is_optional(self) -> None:
        transport = RecordingTransport(payload={"content": []})
        _client(transport, company_id=None).search_sessions()
        assert "company" not in transport.requests[0].url.params

    def test_http_error_wrapped(self) -> None:
        client = _client(RecordingTransport(status_code=500, payload={"error": "boom"}))
        with pytest.raises(SessionFetchError) as excinfo:
            client.search_sessions()
        assert excinfo.value.status_code == 500

    def test_unexpected_payload(self) -> None:
        client = _client(RecordingTransport(payload=["not", "a", "page"]))
        with pytest.raises(SessionFetchError, match="unexpected"):
            client.search_sessions()

    def test_transport_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = GameBenchClient("qa", "secret", transport=httpx.MockTransport(handler))
        with pytest.raises(SessionFetchError, match="unreachable"):
            client.search_sessions()


class TestGetSession:
    def test_get_session(self) -> None:
        transport = RecordingTransport(payload={"id": "s9", "fpsMin": 30})
        session = _client(transport).get_session("s9")
        assert session == {"id": "s9", "fpsMin": 30}
        assert transport.requests[0].method == "GET"
        assert transport.requests[0].url.path == "/v1/sessions/s9"


class TestValidateCredentials:
    def test_valid(self) -> None:
        transport = RecordingTransport(payload={"content": []})
        assert _client(transport).validate_credentials() is True
        assert transport.requests[0].url.params["pageSize"] == "1"

    def test_rejected(self) -> None:
        assert _client(RecordingTransport(status_code=401)).validate_credentials() is False


def test_from_config_requires_credentials() -> None:
    with pytest.raises(ValueError, match="required"):
        GameBenchClient.from_config(ApiConfig())

"""GameBench telemetry API client.

Only the two endpoints the validator needs: the paged session search and
single-session lookup. Requests are made once; retries are the caller's
business.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from benchgate.models.sessions import SessionPage, SessionQuery

if TYPE_CHECKING:
    from benchgate.config import ApiConfig

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://web.gamebench.net"


class SessionFetchError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class GameBenchClient:
    def __init__(
        self,
        username: str,
        token: str,
        *,
        company_id: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._company_id = company_id
        self._http = httpx.Client(
            base_url=base_url,
            auth=httpx.BasicAuth(username, token),
            timeout=httpx.Timeout(timeout_s),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, api: ApiConfig, transport: httpx.BaseTransport | None = None
    ) -> GameBenchClient:
        if not api.username or not api.token:
            raise ValueError("api.username and api.token are required to fetch sessions")
        return cls(
            api.username,
            api.token,
            company_id=api.company_id,
            base_url=api.base_url,
            timeout_s=api.timeout_s,
            transport=transport,
        )

    def search_sessions(self, query: SessionQuery | None = None) -> SessionPage:
        query = query or SessionQuery()
        params: dict[str, str | int] = {
            "pageSize": query.page_size,
            "page": query.page,
            "sort": query.sort,
        }
        if self._company_id:
            params["company"] = self._company_id
        body = {
            "apps": query.apps,
            "devices": query.devices,
            "manufacturers": query.manufacturers,
        }
        payload = self._request("POST", "/v1/sessions", params=params, json=body)
        if not isinstance(payload, dict):
            raise SessionFetchError("unexpected session search response")
        content = payload.get("content") or []
        page = SessionPage(
            content=[item for item in content if isinstance(item, dict)],
            total_elements=int(payload.get("totalElements") or 0),
            total_pages=int(payload.get("totalPages") or 0),
            size=int(payload.get("size") or 0),
            number=int(payload.get("number") or 0),
        )
        logger.info(
            "fetched %d sessions (page %d of %d)",
            len(page.content),
            page.number + 1,
            page.total_pages,
        )
        return page

    def get_session(self, session_id: str) -> dict[str, object]:
        payload = self._request("GET", f"/v1/sessions/{session_id}")
        if not isinstance(payload, dict):
            raise SessionFetchError(f"unexpected response for session {session_id}")
        return payload

    def validate_credentials(self) -> bool:
        try:
            self.search_sessions(SessionQuery(page=0, page_size=1))
        except SessionFetchError as exc:
            logger.warning("credential check failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GameBenchClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: object) -> object:
        try:
            response = self._http.request(method, path, **kwargs)  # type: ignore[arg-type]
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise SessionFetchError(f"{method} {path} failed with HTTP {status}", status) from exc
        except httpx.HTTPError as exc:
            raise SessionFetchError(f"{method} {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise SessionFetchError(f"{method} {path} returned invalid JSON") from exc


__all__ = ["DEFAULT_BASE_URL", "GameBenchClient", "SessionFetchError"]

# Rev 0.2.0
# taskdesk – HttpGateway (REST adapter shared by all repositories)
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from ..models.errors import GatewayError, MissingIdError
from ..utils.logging_setup import get_logger

_log = get_logger("gateway")


def json_list(body: Any, what: str) -> List[Dict[str, Any]]:
    """Rows of a list endpoint; anything that isn't a JSON list reads as empty."""
    if body is None:
        return []
    if not isinstance(body, list):
        _log.warning("Expected a JSON list of %s, got %s", what, type(body).__name__)
        return []
    return [row for row in body if isinstance(row, dict)]


def json_object(body: Any, what: str) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise GatewayError(None, f"Malformed {what} payload")
    return body


def entity_path(collection: str, entity_id: Any, *tail: str) -> str:
    """`/api/tasks`, 42, "comments" -> `/api/tasks/42/comments`; refuses an empty id."""
    if entity_id is None or str(entity_id) == "":
        raise MissingIdError(f"No id given for {collection}")
    return "/".join((collection.rstrip("/"), str(entity_id)) + tail)


class HttpGateway:
    """
    Thin JSON-over-HTTP wrapper around a requests.Session.
    Every non-2xx answer or transport failure becomes a GatewayError.
    """

    def __init__(self, base_url: str, *, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Content-Type", "application/json")
        self._log = _log

    @property
    def base_url(self) -> str:
        return self._base

    # ---------- verbs ----------

    def get(self, path: str, **kw) -> Any:
        return self.request("GET", path, **kw)

    def post(self, path: str, **kw) -> Any:
        return self.request("POST", path, **kw)

    def put(self, path: str, **kw) -> Any:
        return self.request("PUT", path, **kw)

    def delete(self, path: str, **kw) -> Any:
        return self.request("DELETE", path, **kw)

    def health(self) -> Dict[str, Any]:
        return self.get("/api/health") or {}

    def close(self) -> None:
        self._session.close()

    # ---------- internals ----------

    def _url(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        url = self._url(path)
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.RequestException as exc:
            self._log.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError(None, str(exc), url=url) from exc

        self._log.debug("%s %s -> %s", method, path, resp.status_code)
        body = self._decode(resp)
        if not resp.ok:
            message = body.get("message") if isinstance(body, dict) else None
            message = message or resp.reason or "Request failed"
            self._log.warning("%s %s -> %s: %s", method, path, resp.status_code, message)
            raise GatewayError(resp.status_code, str(message), url=url)
        return body

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        content_type = resp.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return resp.json()
            except ValueError:
                return resp.text
        return resp.text

"""Minimal SpringXD REST client.

Covers the calls the interpreters need: create (and deploy) a stream or job
definition, destroy it by name, and ask for completions of a partial
definition.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode, urlparse
from urllib.request import Request, urlopen

from nbinterp.errors import (
    ConnectError,
    ResourceCreateError,
    ResourceDestroyError,
    XdClientError,
)

logger = logging.getLogger("nbinterp.xd")

DETAIL_LEVEL = 1


class ResourceKind(str, Enum):
    STREAM = "stream"
    JOB = "job"

    @property
    def collection(self) -> str:
        return f"{self.value}s"


def _error_message(body: bytes, fallback: str) -> str:
    """SpringXD answers errors with ``[{"logref": ..., "message": ...}]``."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace").strip() or fallback
    if isinstance(data, list):
        messages = [e.get("message", "") for e in data if isinstance(e, dict)]
        messages = [m for m in messages if m]
        if messages:
            return "; ".join(messages)
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


class XdClient:
    def __init__(self, base_url: str, timeout: float = 30) -> None:
        parsed = urlparse(base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConnectError(f"Invalid SpringXD URL: {base_url!r}")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        form: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        data = None
        headers = {"Accept": "application/json"}
        if form is not None:
            data = urlencode(form).encode("utf-8")
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        req = Request(url, data=data, method=method, headers=headers)
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except HTTPError as e:
            message = _error_message(e.read(), f"HTTP {e.code}")
            raise XdClientError(e.code, message) from None
        except URLError as e:
            raise XdClientError(0, f"SpringXD unreachable at {self.base_url}: {e.reason}") from None

        if not body:
            return None
        return json.loads(body)

    def create(self, kind: ResourceKind, name: str, definition: str, deploy: bool = True) -> Any:
        return self._request(
            "POST",
            f"/{kind.collection}/definitions",
            form={"name": name, "definition": definition, "deploy": str(deploy).lower()},
        )

    def destroy(self, kind: ResourceKind, name: str) -> None:
        self._request("DELETE", f"/{kind.collection}/definitions/{quote(name, safe='')}")

    def completions(self, kind: ResourceKind, prefix: str, detail_level: int = DETAIL_LEVEL) -> list[str] | None:
        """Suggestions for ``prefix``, or None when the server sends no answer."""
        data = self._request(
            "GET",
            f"/completions/{kind.value}",
            params={"start": prefix, "detailLevel": detail_level},
        )
        if data is None:
            return None
        return [str(c) for c in data]


class XdResourceOperations:
    """Kind-specific create / destroy / complete bound to one client."""

    def __init__(self, client: XdClient, kind: ResourceKind) -> None:
        self.client = client
        self.kind = kind

    def create(self, name: str, definition: str) -> None:
        try:
            self.client.create(self.kind, name, definition)
        except XdClientError as e:
            raise ResourceCreateError(name, str(e)) from e
        logger.info("Deployed %s [%s]: [%s]", self.kind.value, name, definition)

    def destroy(self, name: str) -> None:
        try:
            self.client.destroy(self.kind, name)
        except XdClientError as e:
            raise ResourceDestroyError(name, str(e)) from e

    def completions(self, prefix: str) -> list[str] | None:
        return self.client.completions(self.kind, prefix)

"""HTTP client for the host application's local command bridge.

The host (the editor extension that owns the window, the SSH transport and
the connection settings) exposes a small JSON API on localhost. This client
implements both HostShell and ConfigurationProvider on top of it:

    POST /commands/{id}   {"args": [...]}                -> {"result": ...}
    POST /messages        {"level", "message", "modal", "detail"}
    POST /prompt          {"title", "prompt", "password"} -> {"value": ...}
    GET  /config                                          -> config | 404
    PUT  /config          config
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ibmi_sandbox.config import BridgeConfig
from ibmi_sandbox.host import HostBridgeError
from ibmi_sandbox.models import ConnectionConfig

logger = logging.getLogger(__name__)


class HttpHostBridge:
    """Async host bridge client backed by httpx."""

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or BridgeConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self.config.url,
            headers={"User-Agent": "ibmi-sandbox/0.1.0"},
            timeout=self.config.timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpHostBridge:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self._client is None:
            raise HostBridgeError("Host bridge client not started")
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise HostBridgeError(f"{method} {path} failed: {e}") from e
        if response.status_code == 404 and method == "GET":
            return response
        if response.is_error:
            raise HostBridgeError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        """Decode a reply body that must be a JSON object."""
        try:
            data = response.json()
        except ValueError as e:
            raise HostBridgeError(f"Malformed reply from {response.request.url.path}: {e}") from e
        if not isinstance(data, dict):
            raise HostBridgeError(
                f"Expected a JSON object from {response.request.url.path}, "
                f"got {type(data).__name__}"
            )
        return data

    # ── HostShell ────────────────────────────────────────────────────────

    async def execute_command(self, command: str, *args: Any) -> Any:
        logger.debug("Executing host command %s", command)
        response = await self._request("POST", f"/commands/{command}", json={"args": list(args)})
        if not response.content:
            return None
        return self._json(response).get("result")

    async def _message(
        self, level: str, message: str, modal: bool, detail: str | None
    ) -> None:
        await self._request(
            "POST",
            "/messages",
            json={"level": level, "message": message, "modal": modal, "detail": detail},
        )

    async def show_info(
        self, message: str, *, modal: bool = False, detail: str | None = None
    ) -> None:
        await self._message("info", message, modal, detail)

    async def show_error(
        self, message: str, *, modal: bool = False, detail: str | None = None
    ) -> None:
        await self._message("error", message, modal, detail)

    async def prompt_password(self, *, title: str, prompt: str) -> str | None:
        response = await self._request(
            "POST", "/prompt", json={"title": title, "prompt": prompt, "password": True}
        )
        value = self._json(response).get("value")
        return value if isinstance(value, str) else None

    # ── ConfigurationProvider ────────────────────────────────────────────

    async def get_config(self) -> ConnectionConfig | None:
        response = await self._request("GET", "/config")
        if response.status_code == 404:
            return None
        data = self._json(response)
        if not data:
            return None
        try:
            return ConnectionConfig.model_validate(data)
        except ValidationError as e:
            raise HostBridgeError(f"Invalid connection config from host: {e}") from e

    async def update(self, config: ConnectionConfig) -> None:
        await self._request("PUT", "/config", json=config.to_payload())
        logger.info("Connection config updated (%d libraries)", len(config.library_list))

"""
Asynchronous client for the hosting panel's HTTP API.

Only the calls the server-creation wizard needs are wrapped: the caller's
identity and quota, the software (egg) and node catalogs, and server creation.
Authentication rides on the panel's ``auth_token`` session cookie.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import aiohttp

from config import PanelConfig
from logger import log
from state import Draft, Image, Node, Quota

SESSION_COOKIE = "auth_token"


class APIError(Exception):
    """A panel request came back with a non-success status or an unusable body."""

    def __init__(self, message: str, status: Optional[int] = None, endpoint: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.endpoint = endpoint


def _error_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        for key in ("message", "error"):
            if body.get(key):
                return str(body[key])
    return default


class PanelAPIClient:
    """An asynchronous panel client that manages:
      - the aiohttp session (cookie auth, JSON, total timeout)
      - the four wizard calls: quota, eggs, nodes, create server
      - the identity lookup used to gate the wizard
    """

    def __init__(
        self,
        settings: PanelConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Initialize the PanelAPIClient.

        Args:
            settings (PanelConfig): base url, session token, timeout, TLS verification.
            session (Optional[aiohttp.ClientSession]): pre-built session, mainly for tests.
        """
        self._base_url = settings.url.rstrip("/")
        self._token = settings.token
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)
        self._verify_ssl = settings.verify_ssl
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> PanelAPIClient:
        await self.ensure_session()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        await self.close()

    async def ensure_session(self) -> aiohttp.ClientSession:
        """Ensure an aiohttp session is available, creating one if needed."""
        if self._session is None:
            cookies = {SESSION_COOKIE: self._token} if self._token else None
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                cookies=cookies,
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        endpoint: str = "",
        accept_rejection: bool = False,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object.

        Args:
            method: HTTP verb.
            path: Path below the panel base url, e.g. ``/api/eggs``.
            payload: Optional JSON body.
            endpoint: Name used in errors and logs.
            accept_rejection: Return 4xx JSON bodies instead of raising.

        Raises:
            APIError: Non-2xx status, or a body that is not a JSON object.
        """
        endpoint = endpoint or f"{method} {path}"
        session = await self.ensure_session()
        url = f"{self._base_url}{path}"
        async with session.request(method, url, json=payload, ssl=self._verify_ssl) as resp:
            try:
                body = await resp.json(content_type=None)
            except ValueError:
                body = None
            status = resp.status

        log.debug("%s -> %s", endpoint, status)
        rejected = 400 <= status < 500 and accept_rejection and isinstance(body, dict)
        if status >= 300 and not rejected:
            raise APIError(_error_message(body, f"HTTP {status}"), status, endpoint)
        if not isinstance(body, dict):
            raise APIError("Response is not a JSON object", status, endpoint)
        return body

    async def fetch_identity(self) -> Dict[str, Any]:
        body = await self._request("GET", "/api/auth/me", endpoint="identity")
        user = body.get("user")
        if not isinstance(user, dict):
            raise APIError(_error_message(body, "Not logged in"), None, "identity")
        return user

    async def fetch_quota(self) -> Quota:
        body = await self._request("GET", "/api/auth/me", endpoint="quota")
        resources = body.get("resources")
        if not isinstance(resources, dict):
            raise APIError("Account has no resource record", None, "quota")
        return Quota.from_dict(resources)

    async def fetch_images(self) -> List[Image]:
        body = await self._request("GET", "/api/eggs", endpoint="eggs")
        return [Image.from_dict(item) for item in self._listing(body, "eggs")]

    async def fetch_nodes(self) -> List[Node]:
        body = await self._request("GET", "/api/nodes", endpoint="nodes")
        return [Node.from_dict(item) for item in self._listing(body, "nodes")]

    async def create_server(self, draft: Draft) -> Dict[str, Any]:
        """
        Create a server from ``draft``.

        Returns:
            ``{"success": True, "handle": ...}`` or ``{"success": False, "error": ...}``.
            Transport problems and 5xx responses raise instead.
        """
        body = await self._request(
            "POST", "/api/servers",
            payload=draft.to_payload(),
            endpoint="create server",
            accept_rejection=True,
        )
        if not body.get("success"):
            return {"success": False, "error": _error_message(body, "Server creation failed")}

        server = body.get("server") or {}
        handle = server.get("identifier") or server.get("id")
        if handle is None:
            raise APIError("Panel did not return the new server", None, "create server")
        return {"success": True, "handle": str(handle)}

    @staticmethod
    def _listing(body: Dict[str, Any], endpoint: str) -> List[Dict[str, Any]]:
        if body.get("success") is False:
            raise APIError(_error_message(body, f"Failed to fetch {endpoint}"), None, endpoint)
        data = body.get("data")
        if not isinstance(data, list):
            raise APIError(f"Malformed {endpoint} listing", None, endpoint)
        return data

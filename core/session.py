"""Credential store for one MCP connection.

A `SessionContext` is created once by the server and handed to every tool
handler. It holds at most one Salesforce session and one Postman API key;
setting either replaces the previous value. Nothing is persisted and no
expiry is tracked, callers re-authenticate when the token stops working.

No locking is done. Handlers may interleave at await points, which is
safe because a session is immutable once stored and each handler reads it
exactly once before its outbound call. Per-connection contexts would be
needed before serving several clients from one process.
"""
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict

from core.errors import invalid_request

DEFAULT_TIMEOUT = 30.0


class SalesforceSession(BaseModel):
    """OAuth token response fields this server relies on."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str
    instance_url: str
    token_type: str = "Bearer"


class SessionContext:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        # Tests inject an httpx.MockTransport here
        self.transport = transport
        self._session: Optional[SalesforceSession] = None
        self._api_key: Optional[str] = None

    def set_session(self, session: SalesforceSession) -> None:
        self._session = session

    def get_session(self) -> Optional[SalesforceSession]:
        return self._session

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key

    def get_api_key(self) -> Optional[str]:
        return self._api_key

    def require_session(self) -> SalesforceSession:
        if self._session is None:
            raise invalid_request("Salesforce authentication required")
        return self._session

    def require_api_key(self) -> str:
        if not self._api_key:
            raise invalid_request("Postman API key not set")
        return self._api_key

    def http_client(self) -> httpx.AsyncClient:
        """Return a new client; use it as an async context manager for a single call."""
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

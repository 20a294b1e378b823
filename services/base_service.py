"""Base service class with shared functionality.

No Rich imports, no console output. Services return pydantic models and
raise typed exceptions; RequestError from the client passes through.
"""

import logging
from typing import Any

from pydantic import TypeAdapter

from api_client import ApiClient
from config_loader import get_api_base_url, get_api_timeout, load_config

from .session_store import SessionStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for all services.

    Holds the shared ApiClient and resolves the bearer token from the
    session store on every authenticated call.
    """

    def __init__(
        self,
        config: dict | None = None,
        client: ApiClient | None = None,
        sessions: SessionStore | None = None,
    ):
        """Initialize the service.

        Args:
            config: Configuration dictionary. If None, loads from config.json.
            client: ApiClient instance. If None, creates one from config.
            sessions: SessionStore instance. If None, uses data/session.json.
        """
        self.config = config or load_config()
        self.client = client or ApiClient(
            get_api_base_url(self.config), timeout=get_api_timeout(self.config)
        )
        self.sessions = sessions or SessionStore()

    def _token(self) -> str:
        return self.sessions.get_token()

    async def _get(self, path: str, model: Any, auth: bool = False, **params) -> Any:
        """GET a resource and validate it into `model` (a type or list[type])."""
        token = self._token() if auth else None
        data = await self.client.call(path, token=token, params=params or None)
        return TypeAdapter(model).validate_python(data)

    async def _send(
        self,
        path: str,
        method: str,
        body: dict | None = None,
        model: Any = None,
        auth: bool = True,
    ) -> Any:
        """POST/PUT/DELETE and optionally validate the response into `model`."""
        token = self._token() if auth else None
        data = await self.client.call(path, method=method, body=body, token=token)
        if model is None:
            return data
        return TypeAdapter(model).validate_python(data)

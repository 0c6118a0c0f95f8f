"""
Shared httpx plumbing for collaborator clients.

WHAT: Async HTTP requests against the collaborator API with error mapping
WHY: Every client surfaces the same CollaboratorError taxonomy
HOW: httpx.AsyncClient, retry with exponential backoff for idempotent requests
"""

import asyncio
from typing import Any

import httpx

from ..core.config import settings
from ..utils.logger import get_logger
from ..wizard.collaborators import (
    CollaboratorResponseError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
)

logger = get_logger(__name__)


class CollaboratorHTTPClient:
    """Base class for httpx-backed collaborator clients."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.COLLABORATOR_BASE_URL).rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.COLLABORATOR_TIMEOUT),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body.

        GET requests are retried on timeouts and transport errors; writes are
        sent once so an agreement is never recorded twice by the client.

        Raises:
            CollaboratorTimeoutError: Request timed out
            CollaboratorUnavailableError: Collaborator not reachable
            CollaboratorResponseError: Non-2xx status or invalid JSON
        """
        url = f"{self.base_url}{path}"
        attempts = self.max_retries if method.upper() == "GET" else 1

        for attempt in range(attempts):
            try:
                response = await self.client.request(method, url, **kwargs)
                break
            except httpx.TimeoutException as e:
                logger.warning(f"Collaborator timeout {method} {url} (attempt {attempt + 1}/{attempts})")
                if attempt == attempts - 1:
                    raise CollaboratorTimeoutError("The request timed out. Please try again.") from e
            except httpx.ConnectError as e:
                logger.warning(f"Collaborator unreachable {method} {url} (attempt {attempt + 1}/{attempts})")
                if attempt == attempts - 1:
                    raise CollaboratorUnavailableError("Service is not reachable. Please try again.") from e
            except httpx.RequestError as e:
                logger.warning(f"Collaborator transport error {method} {url}: {e!r} (attempt {attempt + 1}/{attempts})")
                if attempt == attempts - 1:
                    raise CollaboratorUnavailableError("Connection to the service failed. Please try again.") from e
            await asyncio.sleep(self.retry_delay * (2 ** attempt))

        if response.is_error:
            code, message = None, f"Request failed with status {response.status_code}"
            try:
                body = response.json()
                code = body.get("error")
                message = body.get("message") or message
            except ValueError:
                pass
            logger.error(f"Collaborator error {method} {url}: {response.status_code} {code}")
            raise CollaboratorResponseError(message, status_code=response.status_code, code=code)

        try:
            return response.json()
        except ValueError as e:
            raise CollaboratorResponseError("Invalid JSON response", status_code=response.status_code) from e

"""REST/JSON record repository: implements the RecordRepository interface.

Talks to the back-office API (``/api/<resource>``) using httpx. Every
response carries a ``{success, data, message}`` envelope; failures of any
kind surface as ``RepositoryFailure`` with a user-facing message.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from pos_admin.application.interfaces.record_repository import RecordRepository
from pos_admin.application.schemas import RecordListEnvelope, RecordMutationEnvelope
from pos_admin.domain.exceptions import DuplicateKeyViolation, RepositoryFailure

logger = logging.getLogger(__name__)

_DUPLICATE_MARKERS = ("already exists", "duplicate entry")


class HttpRecordRepository(RecordRepository):
    """Infrastructure adapter for one resource of the back-office API.

    Pass ``http_client`` to share a pooled client (or a test transport);
    otherwise a short-lived client is created per call.
    """

    def __init__(
        self,
        base_url: str,
        resource: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._resource = resource.strip("/")
        self._http_client = http_client
        self._timeout = timeout

    @property
    def collection_url(self) -> str:
        return f"{self._base_url}/{self._resource}"

    def _record_url(self, record_id: Any) -> str:
        return f"{self.collection_url}/{record_id}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _send(self, method: str, url: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            return await client.request(method, url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RepositoryFailure(resource=self._resource) from exc
        finally:
            if should_close:
                await client.aclose()

    async def list_records(self) -> list[dict[str, Any]]:
        response = await self._send("GET", self.collection_url)
        body = self._decode(response)
        try:
            envelope = RecordListEnvelope.model_validate(body)
        except ValidationError as exc:
            raise RepositoryFailure(resource=self._resource, status_code=response.status_code) from exc
        if not envelope.success:
            self._raise_failure(response.status_code, envelope.message)
        logger.debug("Fetched %d %s records", len(envelope.data), self._resource)
        return envelope.data

    async def create(self, record: dict[str, Any]) -> dict[str, Any] | None:
        response = await self._send("POST", self.collection_url, record)
        return self._mutation_result(response).data

    async def update(self, record_id: Any, record: dict[str, Any]) -> None:
        response = await self._send("PUT", self._record_url(record_id), record)
        self._mutation_result(response)

    async def delete(self, record_id: Any) -> None:
        response = await self._send("DELETE", self._record_url(record_id))
        self._mutation_result(response)

    def _mutation_result(self, response: httpx.Response) -> RecordMutationEnvelope:
        body = self._decode(response)
        try:
            envelope = RecordMutationEnvelope.model_validate(body)
        except ValidationError as exc:
            raise RepositoryFailure(resource=self._resource, status_code=response.status_code) from exc
        if not envelope.success:
            self._raise_failure(response.status_code, envelope.message)
        return envelope

    def _decode(self, response: httpx.Response) -> Any:
        """JSON body of a response; non-2xx statuses raise with the body's message."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = body.get("message") if isinstance(body, dict) else None
            self._raise_failure(response.status_code, message)
        if body is None:
            raise RepositoryFailure(resource=self._resource, status_code=response.status_code)
        return body

    def _raise_failure(self, status_code: int, message: str | None) -> None:
        lowered = (message or "").lower()
        if status_code == 409 or any(marker in lowered for marker in _DUPLICATE_MARKERS):
            raise DuplicateKeyViolation(message, resource=self._resource, status_code=status_code)
        raise RepositoryFailure(message, resource=self._resource, status_code=status_code)

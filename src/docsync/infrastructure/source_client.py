from typing import Any

from src.config.logger_config import logger
from src.docsync.domain.models import Document, InvalidDocumentEntry
from src.docsync.infrastructure.rate_limited import (
    RateLimitedClient,
    ResponseDecodeError,
    expect_status,
    read_json,
)


class OutlineClient:
    """Client for the source documentation API (`documents.*`, `collections.*`)."""

    def __init__(self, http: RateLimitedClient, base_url: str, api_token: str) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token

    async def list_documents(self, offset: int, limit: int) -> list[Document | InvalidDocumentEntry]:
        """Fetch one page. Entries that cannot be decoded come back as InvalidDocumentEntry."""
        payload = {
            "offset": offset,
            "limit": limit,
            "sort": "updatedAt",
            "direction": "DESC",
        }
        data = await self._post("documents.list", payload, operation="fetchDocuments")
        items = data.get("data")
        if items is None:
            return []
        if not isinstance(items, list):
            raise ResponseDecodeError("fetchDocuments", "'data' is not a list")
        entries: list[Document | InvalidDocumentEntry] = []
        for index, item in enumerate(items):
            try:
                entries.append(Document.from_payload(item))
            except (AttributeError, ValueError) as exc:
                entries.append(InvalidDocumentEntry(position=offset + index, reason=str(exc)))
        return entries

    async def export_document(self, document_id: str) -> str:
        data = await self._post("documents.export", {"id": document_id}, operation="exportDocument")
        body = data.get("data")
        if not isinstance(body, str):
            raise ResponseDecodeError("exportDocument", "'data' is not a string")
        return body

    async def fetch_collection_name(self, collection_id: str) -> str:
        data = await self._post("collections.info", {"id": collection_id}, operation="fetchCollectionName")
        info = data.get("data")
        if not isinstance(info, dict) or not isinstance(info.get("name"), str):
            raise ResponseDecodeError("fetchCollectionName", "'data.name' is missing")
        return info["name"]

    async def _post(self, endpoint: str, payload: dict[str, Any], *, operation: str) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        headers = {"Authorization": f"Bearer {self.api_token}"}
        resp = await self.http.request("POST", url, json=payload, headers=headers)
        async with resp:
            await expect_status(resp, operation)
            data = await read_json(resp, operation)
        if not isinstance(data, dict):
            raise ResponseDecodeError(operation, "response body is not an object")
        logger.debug("{} ok ({})", operation, endpoint)
        return data

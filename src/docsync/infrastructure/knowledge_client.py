from http import HTTPStatus
from pathlib import Path

import aiohttp

from src.config.logger_config import logger
from src.docsync.infrastructure.rate_limited import (
    RateLimitedClient,
    ResponseDecodeError,
    expect_status,
    read_json,
)


class OpenWebUIClient:
    """Client for the sink knowledge API (`/knowledge/*`, `/files/`)."""

    def __init__(self, http: RateLimitedClient, base_url: str, api_token: str) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Accept": "application/json",
        }

    async def list_knowledge_files(self, collection_id: str) -> list[str]:
        operation = "listKnowledgeFiles"
        url = f"{self.base_url}/knowledge/{collection_id}"
        resp = await self.http.request("GET", url, headers=self._headers)
        async with resp:
            await expect_status(resp, operation)
            data = await read_json(resp, operation)
        if not isinstance(data, dict):
            raise ResponseDecodeError(operation, "response body is not an object")

        files = data.get("files") or []
        if not isinstance(files, list):
            raise ResponseDecodeError(operation, "'files' is not a list")
        # an entry without an id is kept as "" so the caller can record it as a failed removal
        file_ids: list[str] = []
        for item in files:
            file_id = item.get("id") if isinstance(item, dict) else None
            if not isinstance(file_id, str) or not file_id:
                logger.warning("Knowledge collection {} lists a file entry without id: {!r}", collection_id, item)
                file_id = ""
            file_ids.append(file_id)
        return file_ids

    async def remove_file(self, collection_id: str, file_id: str) -> None:
        url = f"{self.base_url}/knowledge/{collection_id}/file/remove"
        resp = await self.http.request("POST", url, json={"file_id": file_id}, headers=self._headers)
        async with resp:
            await expect_status(resp, "removeFileFromKnowledge")
        logger.info("Removed file ID {} from knowledge collection {}", file_id, collection_id)

    async def upload_file(self, file_path: str | Path) -> str:
        operation = "uploadFile"
        path = Path(file_path)
        content = path.read_bytes()

        def _build_form() -> aiohttp.FormData:
            form = aiohttp.FormData()
            form.add_field("file", content, filename=path.name)
            return form

        url = f"{self.base_url}/files/"
        resp = await self.http.request("POST", url, headers=self._headers, body_factory=_build_form)
        async with resp:
            await expect_status(resp, operation, accepted=(HTTPStatus.OK, HTTPStatus.CREATED))
            data = await read_json(resp, operation)

        file_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(file_id, str) or not file_id:
            raise ResponseDecodeError(operation, "file ID not found in response")
        logger.info("Uploaded file {} with ID {}", path, file_id)
        return file_id

    async def add_file(self, collection_id: str, file_id: str) -> None:
        url = f"{self.base_url}/knowledge/{collection_id}/file/add"
        resp = await self.http.request("POST", url, json={"file_id": file_id}, headers=self._headers)
        async with resp:
            await expect_status(resp, "addToKnowledgeCollection")
        logger.info("Added file ID {} to knowledge collection {}", file_id, collection_id)

import asyncio
import json
from http import HTTPStatus
from typing import Any, Awaitable, Callable

import aiohttp
from aiohttp import ContentTypeError

from src.config.logger_config import logger

DEFAULT_RETRY_AFTER_MS = 1000

SleepFunc = Callable[[float], Awaitable[Any]]
BodyFactory = Callable[[], Any]


class UnexpectedStatusError(Exception):
    """Raised when an API answers with a status the caller does not accept."""

    def __init__(self, operation: str, status: int, body: str = "") -> None:
        self.operation = operation
        self.status = status
        self.body = body
        message = f"{operation}: unexpected status: {status}"
        if body:
            message = f"{message}, body: {body}"
        super().__init__(message)


class ResponseDecodeError(Exception):
    """Raised when a response body is not the JSON shape an operation expects."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}")


def parse_retry_after_ms(value: str | None) -> int:
    """Read a Retry-After header as a number of milliseconds.

    The upstream API sends milliseconds rather than the HTTP-standard seconds.
    Missing or unparsable values fall back to one second.
    """
    if value is None:
        return DEFAULT_RETRY_AFTER_MS
    try:
        millis = int(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_MS
    return max(millis, 0)


class RateLimitedClient:
    """Send requests through a shared session, waiting out 429 responses.

    There is no retry cap: the loop only ends on a non-429 response or a
    transport error, which propagates unchanged.
    """

    def __init__(self, session: aiohttp.ClientSession, sleep: SleepFunc = asyncio.sleep) -> None:
        self.session = session
        self._sleep = sleep

    async def request(
        self,
        method: str,
        url: str,
        *,
        body_factory: BodyFactory | None = None,
        **kwargs: Any,
    ) -> aiohttp.ClientResponse:
        attempt = 0
        while True:
            attempt += 1
            if body_factory is not None:
                kwargs["data"] = body_factory()
            logger.debug("{} {} (attempt {})", method, url, attempt)
            resp = await self.session.request(method, url, **kwargs)
            if resp.status != HTTPStatus.TOO_MANY_REQUESTS:
                return resp

            wait_ms = parse_retry_after_ms(resp.headers.get("Retry-After"))
            resp.release()
            logger.warning("Rate limited: waiting for {}ms before retrying {} {}", wait_ms, method, url)
            await self._sleep(wait_ms / 1000)


async def read_json(resp: aiohttp.ClientResponse, operation: str) -> Any:
    try:
        return await resp.json(content_type=None)
    except (ContentTypeError, json.JSONDecodeError, ValueError) as exc:
        raise ResponseDecodeError(operation, f"invalid JSON body ({exc})") from exc


async def expect_status(
    resp: aiohttp.ClientResponse,
    operation: str,
    accepted: tuple[int, ...] = (HTTPStatus.OK,),
) -> None:
    if resp.status in accepted:
        return
    body = await resp.text()
    raise UnexpectedStatusError(operation, resp.status, body.strip())

"""Mailgun API client that executes assembled request descriptors."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .request_builder import RequestDescriptor


logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MailgunClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30,
        max_retries: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self._transport = transport

    def _headers(self, request: RequestDescriptor) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if request.body is not None:
            headers["Content-Type"] = request.content_type
        return headers

    async def execute(self, request: RequestDescriptor) -> Any:
        url = f"{self.base_url}{request.path}"
        attempt = 0
        while True:
            attempt += 1
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout_seconds,
                    auth=("api", self.api_key),
                    transport=self._transport,
                ) as client:
                    response = await client.request(
                        request.method,
                        url,
                        headers=self._headers(request),
                        content=request.body,
                    )
                break
            except httpx.ConnectError as exc:
                # the request never reached Mailgun, so resending cannot duplicate a send
                if attempt > self.max_retries:
                    raise ExecutionError(f"Unable to reach Mailgun: {exc}") from exc
                backoff = min(2 ** attempt, 6)
                logger.warning(
                    "Mailgun connection failed (attempt %s/%s). Retrying in %ss. %s %s",
                    attempt,
                    self.max_retries,
                    backoff,
                    request.method,
                    request.path,
                )
                await asyncio.sleep(backoff)
            except httpx.HTTPError as exc:
                raise ExecutionError(f"Mailgun request failed: {exc}") from exc

        if response.is_error:
            logger.warning(
                "Mailgun returned %s for %s %s", response.status_code, request.method, request.path
            )
            raise ExecutionError(
                f"Mailgun API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        if not response.content:
            return {"status": "ok"}
        if "json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

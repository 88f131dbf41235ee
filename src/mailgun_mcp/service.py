"""Tool execution: request assembly followed by the Mailgun call."""

from __future__ import annotations

import logging
from typing import Any, Dict

from .logging import redact_payload
from .mailgun_client import MailgunClient
from .models import ToolDefinition
from .request_builder import build_request


logger = logging.getLogger(__name__)


class ToolService:
    def __init__(self, client: MailgunClient) -> None:
        self.client = client

    async def execute_tool(self, tool: ToolDefinition, arguments: Dict[str, Any]) -> Any:
        """Run one tool invocation.

        Raises:
            MissingParameterError: a required path parameter was not supplied.
            ExecutionError: Mailgun could not be reached or answered with an error.
        """
        logger.info("Executing tool=%s arguments=%s", tool.tool_id, redact_payload(arguments))
        request = build_request(tool.method, tool.path, tool.operation, arguments)
        logger.debug(
            "Request %s %s content_type=%s", request.method, request.path, request.content_type
        )
        return await self.client.execute(request)

"""Tool registry: turns allow-listed OpenAPI operations into tool definitions."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .endpoints import ENDPOINTS
from .models import OperationDetails, ToolDefinition
from .request_builder import get_request_content_type
from .schema import build_input_schema


logger = logging.getLogger(__name__)

MAX_TOOL_ID_LENGTH = 64

_NON_WORD = re.compile(r"[^A-Za-z0-9_-]")
_HYPHEN_RUNS = re.compile(r"-+")


def parse_endpoint(endpoint: str) -> Tuple[str, str]:
    method, _, path = endpoint.strip().partition(" ")
    return method, path.strip()


def derive_operation_id(method: str, path: str) -> str:
    return f"{method}-{_HYPHEN_RUNS.sub('-', _NON_WORD.sub('-', path))}"


def sanitize_tool_id(raw_id: str) -> str:
    return _NON_WORD.sub("-", raw_id.lower())


def get_operation_details(
    spec: Dict[str, Any], method: str, path: str
) -> Optional[OperationDetails]:
    path_item = (spec.get("paths") or {}).get(path)
    if not isinstance(path_item, dict):
        return None
    operation = path_item.get(method.lower())
    if not isinstance(operation, dict):
        return None
    return OperationDetails(operation=operation, operation_id=derive_operation_id(method, path))


class ToolRegistry:
    def __init__(self, endpoints: Iterable[str] = ENDPOINTS) -> None:
        self.endpoints = tuple(endpoints)

    def generate_tools(self, spec: Dict[str, Any]) -> List[ToolDefinition]:
        tools: List[ToolDefinition] = []
        for endpoint in self.endpoints:
            method, path = parse_endpoint(endpoint)
            details = get_operation_details(spec, method, path)
            if details is None:
                logger.warning("Endpoint not found in OpenAPI spec: %s", endpoint)
                continue
            try:
                tools.append(self._build_tool(spec, method, path, details))
            except Exception:
                logger.exception("Failed to build tool for endpoint: %s", endpoint)
        logger.info("Generated %s tools from %s endpoints", len(tools), len(self.endpoints))
        return tools

    def _build_tool(
        self, spec: Dict[str, Any], method: str, path: str, details: OperationDetails
    ) -> ToolDefinition:
        tool_id = sanitize_tool_id(details.operation_id)
        operation = self._with_shared_parameters(spec["paths"][path], details.operation)
        description = (
            operation.get("description")
            or operation.get("summary")
            or f"{method.upper()} {path}"
        )
        return ToolDefinition(
            tool_id=tool_id,
            description=description.strip(),
            method=method.upper(),
            path=path,
            operation=operation,
            input_schema=build_input_schema(operation, spec, model_name=f"{tool_id}-input"),
            content_type=get_request_content_type(operation),
        )

    def _with_shared_parameters(
        self, path_item: Dict[str, Any], operation: Dict[str, Any]
    ) -> Dict[str, Any]:
        shared = path_item.get("parameters") or []
        if not shared:
            return operation
        own = operation.get("parameters") or []
        declared = {(p.get("name"), p.get("in")) for p in own}
        inherited = [p for p in shared if (p.get("name"), p.get("in")) not in declared]
        return {**operation, "parameters": [*inherited, *own]}

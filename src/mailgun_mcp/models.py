"""Internal models for generated tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .schema import InputSchema


@dataclass(frozen=True)
class OperationDetails:
    operation: Dict[str, Any]
    operation_id: str


@dataclass(frozen=True)
class ToolDefinition:
    tool_id: str
    description: str
    method: str
    path: str
    operation: Dict[str, Any]
    input_schema: InputSchema
    content_type: str

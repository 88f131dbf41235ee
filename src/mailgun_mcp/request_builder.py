"""Assemble Mailgun HTTP requests from flat tool arguments."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from .schema import get_body_schema


JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_."
_PATH_SAFE_CHARS = "!~*'()"


class MissingParameterError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Required path parameter '{name}' is missing")
        self.name = name


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    content_type: str
    body: Optional[str] = None


def process_path_parameters(
    path: str, operation: Dict[str, Any], arguments: Dict[str, Any]
) -> Tuple[str, Dict[str, Any]]:
    """Substitute ``{name}`` placeholders and return the arguments left over."""
    actual_path = path
    remaining = dict(arguments)

    for parameter in operation.get("parameters") or []:
        if parameter.get("in") != "path":
            continue
        name = parameter.get("name")
        value = remaining.get(name)
        if value is None or value == "":
            if parameter.get("required"):
                raise MissingParameterError(name)
            continue
        actual_path = actual_path.replace(
            f"{{{name}}}", quote(_format_value(value), safe=_PATH_SAFE_CHARS)
        )
        del remaining[name]

    return actual_path, remaining


def separate_parameters(
    arguments: Dict[str, Any], operation: Dict[str, Any], method: str
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split arguments into query and body parts; GET requests never carry a body."""
    if method.upper() == "GET":
        return dict(arguments), {}

    query_names = {
        parameter.get("name")
        for parameter in operation.get("parameters") or []
        if parameter.get("in") == "query"
    }
    query: Dict[str, Any] = {}
    body: Dict[str, Any] = {}
    for key, value in arguments.items():
        if key in query_names:
            query[key] = value
        else:
            body[key] = value
    return query, body


def get_request_content_type(operation: Dict[str, Any]) -> str:
    media_type, _ = get_body_schema(operation.get("requestBody"))
    if media_type == JSON_CONTENT_TYPE:
        return JSON_CONTENT_TYPE
    # multipart uploads are not supported, so multipart and unknown types go as a form
    return FORM_CONTENT_TYPE


def append_query_string(path: str, query: Dict[str, Any]) -> str:
    encoded = _encode_form(query)
    if not encoded:
        return path
    return f"{path}?{encoded}"


def encode_body(body: Dict[str, Any], content_type: str) -> Optional[str]:
    if not body:
        return None
    if content_type == JSON_CONTENT_TYPE:
        return json.dumps(_trim_integral_floats(body))
    return _encode_form(body) or None


def build_request(
    method: str, path: str, operation: Dict[str, Any], arguments: Dict[str, Any]
) -> RequestDescriptor:
    actual_path, remaining = process_path_parameters(path, operation, arguments)
    query, body = separate_parameters(remaining, operation, method)
    content_type = get_request_content_type(operation)
    return RequestDescriptor(
        method=method.upper(),
        path=append_query_string(actual_path, query),
        content_type=content_type,
        body=encode_body(body, content_type),
    )


def _encode_form(values: Dict[str, Any]) -> str:
    items: List[Tuple[str, str]] = []
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            items.extend((key, _format_value(item)) for item in value if item is not None)
        else:
            items.append((key, _format_value(value)))
    return str(httpx.QueryParams(items))


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(_trim_integral_floats(value))
    return str(value)


def _trim_integral_floats(value: Any) -> Any:
    # "number" arguments validate as float; 10 must not go out as 10.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _trim_integral_floats(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_trim_integral_floats(item) for item in value]
    return value

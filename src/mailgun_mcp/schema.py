"""Translate OpenAPI schema fragments into pydantic tool input models."""

from __future__ import annotations

import keyword
import logging
import re
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, create_model
from pydantic.networks import validate_email

from .openapi import resolve_reference


logger = logging.getLogger(__name__)

BODY_CONTENT_TYPES = (
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)

# Components some published Mailgun specs reference without defining.
REFERENCE_FALLBACKS: Dict[str, Any] = {
    "EventSeverityType": Literal["temporary", "permanent"],
}

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_email(value: str) -> str:
    validate_email(value)
    return value


def _check_uri(value: str) -> str:
    _URL_ADAPTER.validate_python(value)
    return value


# Format checks validate only; the caller's string is sent as given.
_STRING_FORMATS: Dict[str, Tuple[Any, str]] = {
    "email": (
        Annotated[str, AfterValidator(_check_email), Field(json_schema_extra={"format": "email"})],
        "Email address",
    ),
    "uri": (
        Annotated[str, AfterValidator(_check_uri), Field(json_schema_extra={"format": "uri"})],
        "URI",
    ),
}

_MODEL_CONFIG = ConfigDict(extra="allow", populate_by_name=True)


@dataclass(frozen=True)
class InputField:
    name: str
    required: bool
    annotation: Any


@dataclass(frozen=True)
class InputSchema:
    """Ordered tool arguments plus the pydantic model that validates them."""

    fields: Tuple[InputField, ...]
    model: type[BaseModel]

    def __contains__(self, name: object) -> bool:
        return any(field.name == name for field in self.fields)

    def __getitem__(self, name: str) -> InputField:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def __iter__(self) -> Iterator[InputField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def names(self) -> List[str]:
        return [field.name for field in self.fields]

    def json_schema(self) -> Dict[str, Any]:
        return self.model.model_json_schema(by_alias=True)


class InputSchemaBuilder:
    def __init__(self) -> None:
        self._fields: List[InputField] = []

    def add(self, name: str, required: bool, annotation: Any) -> None:
        if any(field.name == name for field in self._fields):
            logger.debug("Ignoring duplicate argument declaration: %s", name)
            return
        self._fields.append(InputField(name=name, required=required, annotation=annotation))

    def build(self, model_name: str) -> InputSchema:
        fields = tuple(self._fields)
        return InputSchema(fields=fields, model=_build_model(model_name, fields))


def openapi_to_annotation(
    schema: Optional[Dict[str, Any]], spec: Dict[str, Any], name: str = "Object"
) -> Any:
    """Convert an OpenAPI schema fragment into a pydantic-compatible annotation.

    Never raises: fragments that cannot be represented become ``Any``. For
    strings, ``enum`` takes precedence over ``format``, and an explicit
    ``description`` replaces the default one a format supplies.
    """
    if not schema or not isinstance(schema, dict):
        return Any

    if "$ref" in schema:
        ref = schema["$ref"]
        resolved = resolve_reference(ref, spec)
        if resolved is None:
            fallback = REFERENCE_FALLBACKS.get(str(ref).rsplit("/", 1)[-1])
            if fallback is not None:
                return fallback
            logger.debug("Unresolved schema reference %s; accepting any value", ref)
            return Any
        return openapi_to_annotation(resolved, spec, name=str(ref).rsplit("/", 1)[-1])

    schema_type = schema.get("type")
    description = schema.get("description")

    if schema_type == "string":
        return _string_annotation(schema)

    if schema_type in {"number", "integer"}:
        base = int if schema_type == "integer" else float
        constraints: Dict[str, Any] = {}
        if schema.get("minimum") is not None:
            constraints["ge"] = schema["minimum"]
        if schema.get("maximum") is not None:
            constraints["le"] = schema["maximum"]
        return _with_field(base, description=description, **constraints)

    if schema_type == "boolean":
        return _with_field(bool, description=description)

    if schema_type == "array":
        items = openapi_to_annotation(schema.get("items"), spec, name=f"{name}Item")
        return _with_field(List[items], description=description)  # type: ignore[valid-type]

    if schema_type == "object" or (schema_type is None and "properties" in schema):
        properties = schema.get("properties")
        if not properties:
            return _with_field(Dict[str, Any], description=description)
        required = set(schema.get("required") or [])
        builder = InputSchemaBuilder()
        for prop_name, prop_schema in properties.items():
            annotation = openapi_to_annotation(prop_schema, spec, name=f"{name}_{prop_name}")
            builder.add(prop_name, prop_name in required, annotation)
        return _with_field(builder.build(name).model, description=description)

    alternatives = schema.get("oneOf") or schema.get("anyOf")
    if alternatives:
        members = tuple(
            openapi_to_annotation(option, spec, name=f"{name}Option{index}")
            for index, option in enumerate(alternatives)
        )
        # typing collapses a single-member Union to the member itself
        return _with_field(Union[members], description=description)  # type: ignore[valid-type]

    return Any


def get_body_schema(
    request_body: Optional[Dict[str, Any]],
) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
    """Pick the request body schema by media type priority (JSON, form, multipart)."""
    content = (request_body or {}).get("content") or {}
    for media_type in BODY_CONTENT_TYPES:
        media = content.get(media_type) or {}
        schema = media.get("schema")
        if schema:
            return media_type, schema
    return None, None


def process_parameters(
    parameters: Optional[List[Dict[str, Any]]],
    builder: InputSchemaBuilder,
    spec: Dict[str, Any],
) -> None:
    for parameter in parameters or []:
        name = parameter.get("name")
        if not name:
            continue
        schema = parameter.get("schema")
        annotation = openapi_to_annotation(schema, spec, name=_model_name(name))
        description = parameter.get("description")
        if description and not (schema or {}).get("description"):
            annotation = _with_field(annotation, description=description)
        builder.add(name, parameter.get("required") is True, annotation)


def process_request_body(
    request_body: Optional[Dict[str, Any]],
    builder: InputSchemaBuilder,
    spec: Dict[str, Any],
) -> None:
    _, schema = get_body_schema(request_body)
    if schema and "$ref" in schema:
        schema = resolve_reference(schema["$ref"], spec)
    if not schema or not isinstance(schema, dict):
        return

    required = set(schema.get("required") or [])
    for prop_name, prop_schema in (schema.get("properties") or {}).items():
        annotation = openapi_to_annotation(prop_schema, spec, name=_model_name(prop_name))
        builder.add(prop_name, prop_name in required, annotation)


def build_input_schema(
    operation: Dict[str, Any], spec: Dict[str, Any], model_name: str = "ToolInput"
) -> InputSchema:
    """Flatten an operation's path/query parameters and body properties into one schema."""
    builder = InputSchemaBuilder()
    process_parameters(operation.get("parameters"), builder, spec)
    if operation.get("requestBody"):
        process_request_body(operation["requestBody"], builder, spec)
    return builder.build(model_name)


def _string_annotation(schema: Dict[str, Any]) -> Any:
    enum_values = schema.get("enum")
    default_description: Optional[str] = None
    if enum_values and all(isinstance(value, (str, int, float, bool)) for value in enum_values):
        base: Any = Literal[tuple(enum_values)]  # type: ignore[valid-type]
    elif schema.get("format") in _STRING_FORMATS:
        base, default_description = _STRING_FORMATS[schema["format"]]
    else:
        base = str
    return _with_field(base, description=schema.get("description") or default_description)


def _with_field(annotation: Any, description: Optional[str] = None, **constraints: Any) -> Any:
    kwargs = {key: value for key, value in constraints.items() if value is not None}
    if description:
        kwargs["description"] = description
    if not kwargs:
        return annotation
    return Annotated[annotation, Field(**kwargs)]


def _build_model(model_name: str, fields: Tuple[InputField, ...]) -> type[BaseModel]:
    definitions: Dict[str, Any] = {}
    for field in fields:
        attribute = _field_name(field.name, definitions)
        kwargs: Dict[str, Any] = {}
        if attribute != field.name:
            kwargs["alias"] = field.name
        # optional arguments may be omitted but are not nullable
        default = ... if field.required else None
        definitions[attribute] = (field.annotation, Field(default, **kwargs))
    return create_model(_model_name(model_name), __config__=_MODEL_CONFIG, **definitions)


def _field_name(name: str, taken: Dict[str, Any]) -> str:
    """Turn an argument name such as ``o:tag`` or ``from`` into a model attribute."""
    candidate = re.sub(r"[^0-9a-zA-Z_]", "_", name)
    if not candidate or not candidate[0].isalpha() or candidate.startswith("model_"):
        candidate = f"f_{candidate}"
    if keyword.iskeyword(candidate) or hasattr(BaseModel, candidate):
        candidate = f"{candidate}_"
    while candidate in taken:
        candidate = f"{candidate}_"
    return candidate


def _model_name(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name) or "Model"

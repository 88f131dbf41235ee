"""OpenAPI document loading and local reference resolution."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"


class SpecLoadError(Exception):
    pass


def load_openapi_spec(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse an OpenAPI document from a YAML or JSON file.

    Raises:
        SpecLoadError: the file is missing, unreadable, unparsable, or does not
            hold a mapping at its root.
    """
    spec_path = Path(path)
    try:
        content = spec_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Unable to read OpenAPI spec at {spec_path}: {exc}") from exc

    try:
        if spec_path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            # YAML is a superset of JSON, so this also covers unsuffixed JSON files
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as exc:
        raise SpecLoadError(f"Unable to parse OpenAPI spec at {spec_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SpecLoadError(f"OpenAPI spec at {spec_path} is not a mapping")

    logger.info(
        "Loaded OpenAPI spec %s (%s paths)", spec_path, len(data.get("paths") or {})
    )
    return data


def resolve_reference(ref: str, spec: Dict[str, Any]) -> Optional[Any]:
    """Return the fragment a local ``#/components/schemas/...`` pointer names.

    Nested pointers such as ``#/components/schemas/Parent/NestedType`` walk
    into the named schema. Any other pointer, or one whose target is absent,
    yields ``None``.
    """
    if not isinstance(ref, str) or not ref.startswith(SCHEMA_REF_PREFIX):
        return None
    segments = ref[2:].split("/")
    return _lookup(spec, segments)


def _lookup(node: Any, segments: List[str]) -> Optional[Any]:
    if not segments:
        return node
    head, rest = segments[0], segments[1:]
    if isinstance(node, dict):
        if head not in node:
            return None
        return _lookup(node[head], rest)
    if isinstance(node, list) and head.isdigit():
        index = int(head)
        if index >= len(node):
            return None
        return _lookup(node[index], rest)
    return None

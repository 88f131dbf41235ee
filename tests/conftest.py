"""Shared fixtures for the Mailgun MCP tests."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from mailgun_mcp.config import DEFAULT_OPENAPI_PATH
from mailgun_mcp.openapi import load_openapi_spec


@pytest.fixture(scope="session")
def bundled_spec() -> Dict[str, Any]:
    """The OpenAPI document shipped with the package."""
    return load_openapi_spec(DEFAULT_OPENAPI_PATH)


@pytest.fixture
def message_spec() -> Dict[str, Any]:
    """Small spec with one form endpoint, one JSON endpoint and shared components."""
    return {
        "openapi": "3.0.0",
        "paths": {
            "/v3/{domain_name}/messages": {
                "post": {
                    "summary": "Send an email",
                    "parameters": [
                        {
                            "name": "domain_name",
                            "in": "path",
                            "required": True,
                            "schema": {"type": "string"},
                        }
                    ],
                    "requestBody": {
                        "content": {
                            "multipart/form-data": {
                                "schema": {"$ref": "#/components/schemas/Message"}
                            }
                        }
                    },
                }
            },
            "/v4/domains": {
                "get": {
                    "summary": "Get domains",
                    "parameters": [
                        {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                        {"name": "skip", "in": "query", "schema": {"type": "integer"}},
                    ],
                }
            },
            "/v1/analytics/metrics": {
                "post": {
                    "summary": "Query metrics",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "metrics": {"type": "array", "items": {"type": "string"}},
                                        "duration": {"type": "string"},
                                    },
                                    "required": ["metrics"],
                                }
                            }
                        }
                    },
                }
            },
        },
        "components": {
            "schemas": {
                "Message": {
                    "type": "object",
                    "properties": {
                        "from": {"type": "string"},
                        "to": {"type": "array", "items": {"type": "string"}},
                        "subject": {"type": "string"},
                        "o:tag": {"type": "array", "items": {"type": "string"}},
                        "o:testmode": {"type": "string", "enum": ["yes", "no"]},
                    },
                    "required": ["from", "to"],
                }
            }
        },
    }

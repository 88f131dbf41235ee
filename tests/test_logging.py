"""Tests for argument redaction in logs."""

from mailgun_mcp.logging import redact_payload


def test_masks_credential_keys():
    redacted = redact_payload({"api_key": "key-123", "webhook_signing_key": "abc", "to": "a@example.com"})
    assert redacted == {
        "api_key": "***REDACTED***",
        "webhook_signing_key": "***REDACTED***",
        "to": "a@example.com",
    }


def test_nested_values():
    redacted = redact_payload({"options": {"password": "hunter2", "limit": 5}, "to": ["a@example.com"]})
    assert redacted == {"options": {"password": "***REDACTED***", "limit": 5}, "to": ["a@example.com"]}


def test_shortens_long_bodies():
    html = "<p>" + "x" * 500 + "</p>"
    redacted = redact_payload({"html": html})
    assert redacted["html"].startswith("<p>xxx")
    assert redacted["html"].endswith(f"({len(html)} chars)")
    assert len(redacted["html"]) < len(html)

from codex_client.logging import _make_redaction_processor, redact


def test_redact_masks_sensitive_keys_and_bearer_tokens():
    event = {
        "event": "completion_dispatched",
        "headers": {"Authorization": "Bearer sk-abcdef123456", "Content-Type": "application/json"},
        "api_key": "sk-abcdef123456",
        "max_tokens": 1024,
        "note": "sent with Bearer sk-zzzzzz999999",
    }

    out = redact(event, secrets=[])

    assert out["headers"]["Authorization"] == "[REDACTED]"
    assert out["headers"]["Content-Type"] == "application/json"
    assert out["api_key"] == "[REDACTED]"
    assert out["max_tokens"] == 1024
    assert out["note"] == "sent with Bearer [REDACTED]"


def test_redaction_processor_scrubs_registered_secrets():
    processor = _make_redaction_processor(secrets=["sk-live-secret", ""])

    out = processor(None, "info", {"event": "failed", "error": "bad key sk-live-secret", "items": ["sk-live-secret"]})

    assert out == {"event": "failed", "error": "bad key [REDACTED]", "items": ["[REDACTED]"]}

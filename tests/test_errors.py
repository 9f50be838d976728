"""Error taxonomy tests: status codes, payload shapes and hierarchy."""

from __future__ import annotations

import pytest

from gddforge.errors import (
    ConflictError,
    GDDForgeError,
    InsufficientContextError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    UnknownModelError,
    ValidationError,
)
from gddforge.llm.models import LLMError


# ========================================================================
# Status codes
# ========================================================================


@pytest.mark.parametrize(
    "error, status, code",
    [
        (ValidationError("bad"), 400, "VALIDATION_ERROR"),
        (NotFoundError("missing"), 404, "NOT_FOUND"),
        (UnknownModelError("gpt-99"), 400, "UNKNOWN_MODEL"),
        (InsufficientContextError("thin", 0, False), 400, "INSUFFICIENT_CONTEXT"),
        (ProviderError("boom"), 502, "PROVIDER_ERROR"),
        (PersistenceError("disk"), 500, "PERSISTENCE_ERROR"),
        (ConflictError("stale", current_version=3), 409, "CONFLICT"),
    ],
)
def test_status_and_code(error, status, code):
    assert isinstance(error, GDDForgeError)
    assert error.status_code == status
    assert error.code == code


def test_not_found_is_validation_error():
    """Unknown section/subsection is a client error like any other bad input."""
    assert issubclass(NotFoundError, ValidationError)
    assert issubclass(UnknownModelError, ValidationError)


# ========================================================================
# Payloads
# ========================================================================


def test_default_payload():
    assert ValidationError("Text is too short").to_payload() == {
        "error": "Text is too short",
        "code": "VALIDATION_ERROR",
    }


def test_unknown_model_names_id():
    err = UnknownModelError("gpt-99")
    assert err.model_id == "gpt-99"
    assert "gpt-99" in err.to_payload()["error"]


def test_insufficient_context_payload_has_counters():
    payload = InsufficientContextError("Add more detail", 1, True).to_payload()
    assert payload == {
        "error": "Add more detail",
        "code": "INSUFFICIENT_CONTEXT",
        "filledCount": 1,
        "hasGameInfo": True,
    }


def test_conflict_payload_has_current_version():
    payload = ConflictError("stale", current_version=4).to_payload()
    assert payload["currentVersion"] == 4
    assert payload["code"] == "CONFLICT"


def test_provider_payload_hides_vendor_message():
    err = ProviderError("anthropic said: invalid x-api-key sk-ant-123", provider="anthropic")
    payload = err.to_payload()
    assert payload == {"error": "AI provider request failed", "code": "PROVIDER_ERROR"}
    assert "sk-ant" not in str(payload)


# ========================================================================
# LLMError wrapper
# ========================================================================


def test_llm_error_is_provider_error():
    cause = RuntimeError("connection reset")
    err = LLMError("openai", "generate_stream", cause, retryable=True, model_id="gpt-4o")
    assert isinstance(err, ProviderError)
    assert err.provider == "openai"
    assert err.operation == "generate_stream"
    assert err.model_id == "gpt-4o"
    assert err.retryable is True
    assert err.__cause__ is cause
    assert "connection reset" in str(err)


def test_llm_error_defaults_not_retryable():
    err = LLMError("google", "generate", ValueError("bad"))
    assert err.retryable is False
    assert err.model_id is None

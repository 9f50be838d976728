"""Error taxonomy shared by the services, the store and the HTTP layer."""

from __future__ import annotations

from typing import Any


class GDDForgeError(Exception):
    """Base error with a stable, client-safe shape."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(GDDForgeError):
    """Bad or missing input. Raised before any provider call."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(ValidationError):
    """Unknown section or subsection."""

    status_code = 404
    code = "NOT_FOUND"


class UnknownModelError(ValidationError):
    code = "UNKNOWN_MODEL"

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unknown model: {model_id!r}")
        self.model_id = model_id


class InsufficientContextError(GDDForgeError):
    """Not enough authored content to generate from.

    Carries the counters the UI needs to tell the user what to fill in.
    """

    status_code = 400
    code = "INSUFFICIENT_CONTEXT"

    def __init__(self, message: str, filled_count: int, has_game_info: bool) -> None:
        super().__init__(message)
        self.filled_count = filled_count
        self.has_game_info = has_game_info

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["filledCount"] = self.filled_count
        payload["hasGameInfo"] = self.has_game_info
        return payload


class ProviderError(GDDForgeError):
    """Network, auth, rate-limit or malformed-response failure from an LLM vendor."""

    status_code = 502
    code = "PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model_id: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.model_id = model_id
        self.retryable = retryable

    def to_payload(self) -> dict[str, Any]:
        # Vendor messages can echo request details; keep the client payload generic.
        return {"error": "AI provider request failed", "code": self.code}


class PersistenceError(GDDForgeError):
    code = "PERSISTENCE_ERROR"


class ConflictError(PersistenceError):
    """Save rejected because the stored version moved on since it was read."""

    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str, current_version: int) -> None:
        super().__init__(message)
        self.current_version = current_version

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["currentVersion"] = self.current_version
        return payload

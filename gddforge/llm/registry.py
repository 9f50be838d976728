"""Catalog of selectable models and their availability.

Availability is a local check for the provider's credential in the
environment mapping captured when the registry is built. No network calls.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from gddforge.config.models import ProvidersConfig
from gddforge.errors import UnknownModelError
from gddforge.llm.models import ProviderName

DEFAULT_MODEL_ID = "claude-sonnet"


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: ProviderName
    model: str
    description: str


class ModelOption(BaseModel):
    """A catalog entry as shown to users, with availability resolved."""

    id: str
    name: str
    provider: ProviderName
    description: str
    available: bool


class ResolvedModel(BaseModel):
    """Provider-specific invocation parameters for one catalog entry."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    provider: ProviderName
    model: str
    api_key_env: str
    base_url: str | None = None


MODEL_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="claude-sonnet",
        name="Claude Sonnet",
        provider="anthropic",
        model="claude-sonnet-4-20250514",
        description="Balanced performance and speed",
    ),
    CatalogEntry(
        id="claude-haiku",
        name="Claude Haiku",
        provider="anthropic",
        model="claude-3-5-haiku-20241022",
        description="Fast and efficient",
    ),
    CatalogEntry(
        id="gpt-4o",
        name="ChatGPT 4o",
        provider="openai",
        model="gpt-4o",
        description="OpenAI's flagship model",
    ),
    CatalogEntry(
        id="gpt-4o-mini",
        name="ChatGPT 4o Mini",
        provider="openai",
        model="gpt-4o-mini",
        description="Fast and affordable",
    ),
    CatalogEntry(
        id="gemini-2-flash",
        name="Gemini 2.0 Flash",
        provider="google",
        model="gemini-2.0-flash",
        description="Google's fast model",
    ),
    CatalogEntry(
        id="grok-4",
        name="Grok 4",
        provider="xai",
        model="grok-4",
        description="xAI's flagship model",
    ),
    CatalogEntry(
        id="llama-3.3-70b",
        name="Llama 3.3 70B",
        provider="groq",
        model="llama-3.3-70b-versatile",
        description="Fast & free via Groq",
    ),
    CatalogEntry(
        id="mixtral-8x7b",
        name="Mixtral 8x7B",
        provider="groq",
        model="mixtral-8x7b-32768",
        description="Fast & free via Groq",
    ),
)


class ModelRegistry:
    """Model lookup bound to one provider configuration and environment snapshot.

    Build it once at startup and inject it; tests pass their own environ.
    """

    def __init__(
        self,
        providers: ProvidersConfig | None = None,
        environ: Mapping[str, str] | None = None,
        default_model_id: str = DEFAULT_MODEL_ID,
        catalog: tuple[CatalogEntry, ...] = MODEL_CATALOG,
    ) -> None:
        self.providers = providers or ProvidersConfig()
        self._environ = dict(os.environ if environ is None else environ)
        self._catalog = {entry.id: entry for entry in catalog}
        if default_model_id not in self._catalog:
            raise UnknownModelError(default_model_id)
        self.default_model_id = default_model_id

    def api_key_env(self, provider: ProviderName) -> str:
        return getattr(self.providers, provider).api_key_env

    def api_key(self, provider: ProviderName) -> str | None:
        return self._environ.get(self.api_key_env(provider)) or None

    def is_provider_configured(self, provider: ProviderName) -> bool:
        return self.api_key(provider) is not None

    def list_models(self) -> list[ModelOption]:
        return [
            ModelOption(
                id=entry.id,
                name=entry.name,
                provider=entry.provider,
                description=entry.description,
                available=self.is_provider_configured(entry.provider),
            )
            for entry in self._catalog.values()
        ]

    def get_entry(self, model_id: str) -> CatalogEntry:
        entry = self._catalog.get(model_id)
        if entry is None:
            raise UnknownModelError(model_id)
        return entry

    def resolve_model(self, model_id: str | None = None) -> ResolvedModel:
        """Map a model id to invocation parameters.

        None selects the default model. An unknown id raises and is never
        replaced by another model. Credential presence is not checked here.
        """
        entry = self.get_entry(self.default_model_id if model_id is None else model_id)
        credential = getattr(self.providers, entry.provider)
        return ResolvedModel(
            model_id=entry.id,
            provider=entry.provider,
            model=entry.model,
            api_key_env=credential.api_key_env,
            base_url=credential.base_url,
        )

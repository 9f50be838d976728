"""Per-user preferred model, validated against the model registry."""

from __future__ import annotations

import logging

from gddforge.errors import ValidationError
from gddforge.llm.registry import ModelRegistry
from gddforge.store.base import PreferencesStore

logger = logging.getLogger(__name__)


class PreferencesService:
    def __init__(self, store: PreferencesStore, registry: ModelRegistry) -> None:
        self.store = store
        self.registry = registry

    def get_preferred_model(self, user_id: str) -> str:
        """Stored model id, or the registry default when none (or a retired one) is stored."""
        model_id = self.store.get_preferred_model(user_id)
        if model_id is None:
            return self.registry.default_model_id
        try:
            self.registry.get_entry(model_id)
        except ValidationError:
            logger.warning("user %s prefers unknown model %r, using default", user_id, model_id)
            return self.registry.default_model_id
        return model_id

    def set_preferred_model(self, user_id: str, model_id: str) -> None:
        entry = self.registry.get_entry(model_id)
        if not self.registry.is_provider_configured(entry.provider):
            raise ValidationError(f"{entry.name} is not available. API key not configured.")
        self.store.set_preferred_model(user_id, model_id)
        logger.info("user %s switched model to %s", user_id, model_id)

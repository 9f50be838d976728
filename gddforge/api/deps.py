"""FastAPI dependencies: services live on app.state, built once by create_app()."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from gddforge.drafter import CompletionService, EnhancementService, GenerationService
from gddforge.llm.registry import ModelRegistry
from gddforge.preferences import PreferencesService
from gddforge.store.sqlite_store import SQLiteSectionStore


def get_store(request: Request) -> SQLiteSectionStore:
    return request.app.state.store


def get_registry(request: Request) -> ModelRegistry:
    return request.app.state.registry


def get_generation(request: Request) -> GenerationService:
    return request.app.state.generation


def get_enhancement(request: Request) -> EnhancementService:
    return request.app.state.enhancement


def get_completion(request: Request) -> CompletionService:
    return request.app.state.completion


def get_preferences(request: Request) -> PreferencesService:
    return request.app.state.preferences


StoreDep = Annotated[SQLiteSectionStore, Depends(get_store)]
RegistryDep = Annotated[ModelRegistry, Depends(get_registry)]
GenerationDep = Annotated[GenerationService, Depends(get_generation)]
EnhancementDep = Annotated[EnhancementService, Depends(get_enhancement)]
CompletionDep = Annotated[CompletionService, Depends(get_completion)]
PreferencesDep = Annotated[PreferencesService, Depends(get_preferences)]

"""AI endpoints: generate, enhance, complete, model catalog and preferences."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from gddforge.api.deps import (
    CompletionDep,
    EnhancementDep,
    GenerationDep,
    PreferencesDep,
    RegistryDep,
)
from gddforge.api.schemas import (
    CompletionResponse,
    ModelsResponse,
    PreferencesBody,
    PreferencesResponse,
)
from gddforge.api.streaming import collect, primed_stream_response
from gddforge.drafter.models import CompletionRequest, EnhancementRequest, GenerationRequest

router = APIRouter(tags=["ai"])


@router.post("/ai/generate", response_class=StreamingResponse)
async def generate(body: GenerationRequest, generation: GenerationDep) -> StreamingResponse:
    """Stream a draft for one subsection as raw text chunks."""
    return await primed_stream_response(generation.generate(body))


@router.post("/ai/enhance", response_class=StreamingResponse)
async def enhance(body: EnhancementRequest, enhancement: EnhancementDep) -> StreamingResponse:
    """Stream a rewrite of the given text as raw text chunks."""
    return await primed_stream_response(enhancement.enhance(body))


@router.post("/ai/complete", response_model=CompletionResponse, response_model_by_alias=True)
async def complete(body: CompletionRequest, completion: CompletionDep) -> CompletionResponse:
    stream = completion.complete(body)
    if stream is None:
        return CompletionResponse(completion="")
    text = await collect(stream)
    return CompletionResponse(completion=text.strip())


@router.get("/ai/models", response_model=ModelsResponse, response_model_by_alias=True)
def list_models(registry: RegistryDep) -> ModelsResponse:
    return ModelsResponse(models=registry.list_models(), default_model=registry.default_model_id)


@router.get(
    "/users/{user_id}/preferences",
    response_model=PreferencesResponse,
    response_model_by_alias=True,
)
def get_preferences(user_id: str, preferences: PreferencesDep) -> PreferencesResponse:
    return PreferencesResponse(
        user_id=user_id, preferred_model=preferences.get_preferred_model(user_id)
    )


@router.put(
    "/users/{user_id}/preferences",
    response_model=PreferencesResponse,
    response_model_by_alias=True,
)
def put_preferences(
    user_id: str, body: PreferencesBody, preferences: PreferencesDep
) -> PreferencesResponse:
    preferences.set_preferred_model(user_id, body.preferred_model)
    return PreferencesResponse(user_id=user_id, preferred_model=body.preferred_model)

from pydantic import BaseModel, Field
from typing import Literal


class LLMSettings(BaseModel):
    default_model: str = "claude-sonnet"
    max_tokens: int = Field(default=1000, gt=0)
    completion_max_tokens: int = Field(default=100, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout: int = Field(default=60, gt=0)
    max_retries: int = Field(default=2, ge=0)


class ProviderCredential(BaseModel):
    api_key_env: str
    base_url: str | None = None


class ProvidersConfig(BaseModel):
    anthropic: ProviderCredential = Field(
        default_factory=lambda: ProviderCredential(api_key_env="ANTHROPIC_API_KEY")
    )
    openai: ProviderCredential = Field(
        default_factory=lambda: ProviderCredential(api_key_env="OPENAI_API_KEY")
    )
    google: ProviderCredential = Field(
        default_factory=lambda: ProviderCredential(api_key_env="GOOGLE_API_KEY")
    )
    xai: ProviderCredential = Field(
        default_factory=lambda: ProviderCredential(
            api_key_env="XAI_API_KEY", base_url="https://api.x.ai/v1"
        )
    )
    groq: ProviderCredential = Field(
        default_factory=lambda: ProviderCredential(
            api_key_env="GROQ_API_KEY", base_url="https://api.groq.com/openai/v1"
        )
    )


class GenerationPolicy(BaseModel):
    min_enhance_chars: int = Field(default=10, ge=1)
    min_completion_chars: int = Field(default=3, ge=1)
    min_concept_chars: int = Field(default=10, ge=0)
    min_content_chars: int = Field(default=10, ge=0)
    min_filled_subsections: int = Field(default=2, ge=0)


class StorageConfig(BaseModel):
    db_path: str = ".gddforge/gdd.db"


class SessionConfig(BaseModel):
    autosave_seconds: float = Field(default=30.0, gt=0)
    save_on_accept: bool = True
    check_conflicts: bool = True


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)


class GDDForgeConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    generation: GenerationPolicy = Field(default_factory=GenerationPolicy)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

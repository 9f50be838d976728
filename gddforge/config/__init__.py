from .loader import find_config_file, load_config
from .models import (
    GDDForgeConfig,
    GenerationPolicy,
    LLMSettings,
    ProviderCredential,
    ProvidersConfig,
    ServerConfig,
    SessionConfig,
    StorageConfig,
)

__all__ = [
    "GDDForgeConfig",
    "GenerationPolicy",
    "LLMSettings",
    "ProviderCredential",
    "ProvidersConfig",
    "ServerConfig",
    "SessionConfig",
    "StorageConfig",
    "find_config_file",
    "load_config",
]

"""Provider implementations."""

from .base import Provider, ProviderCapabilities
from .deepseek import DeepSeekProvider
from .openai import OpenAIProvider
from .registry import Credentials, create_provider, resolve_credentials

__all__ = [
    "Credentials",
    "DeepSeekProvider",
    "OpenAIProvider",
    "Provider",
    "ProviderCapabilities",
    "create_provider",
    "resolve_credentials",
]

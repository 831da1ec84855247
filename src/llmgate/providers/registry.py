"""Provider registry: selector -> credentials -> concrete provider.

Resolution is a pure lookup against the supplied environment mapping and is
repeated on every call; credentials are never cached.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import TYPE_CHECKING

from llmgate.config import Config, ProviderName, normalize_provider
from llmgate.errors import MissingCredentialError
from llmgate.providers.deepseek import DeepSeekProvider
from llmgate.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from llmgate.providers.base import Provider

log = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[ProviderName, type[OpenAIProvider]] = {
    "openai": OpenAIProvider,
    "deepseek": DeepSeekProvider,
}

# (api key variable, base URL override variable)
_ENV_VARS: dict[ProviderName, tuple[str, str]] = {
    "openai": ("OPENAI_API_KEY", "OPENAI_BASE_URL"),
    "deepseek": ("DEEPSEEK_API_KEY", "DEEPSEEK_BASE_URL"),
}


@dataclass(frozen=True)
class Credentials:
    """Connection parameters for one provider, scoped to a single request."""

    provider: ProviderName
    api_key: str
    base_url: str | None = None

    def __str__(self) -> str:
        """Return a redacted representation."""
        return (
            f"Credentials(provider={self.provider!r}, api_key=[REDACTED], "
            f"base_url={self.base_url!r})"
        )

    __repr__ = __str__


def resolve_credentials(
    provider: str | None = None, *, env: Mapping[str, str] | None = None
) -> Credentials:
    """Resolve credentials for *provider* (default provider when omitted).

    Raises:
        ConfigurationError: If the selector names no supported provider.
        MissingCredentialError: If the resolved provider's API key is unset.
    """
    name = normalize_provider(provider)
    environ = os.environ if env is None else env
    key_var, url_var = _ENV_VARS[name]

    api_key = (environ.get(key_var) or "").strip()
    if not api_key:
        raise MissingCredentialError(
            f"{key_var} is not set",
            hint=f"Set {key_var} in the environment or .env file.",
            provider=name,
        )
    base_url = (environ.get(url_var) or "").strip() or PROVIDER_CLASSES[
        name
    ].default_base_url
    return Credentials(provider=name, api_key=api_key, base_url=base_url)


def create_provider(provider: str | None = None, *, config: Config | None = None) -> Provider:
    """Build the concrete provider for *provider* with fresh credentials."""
    config = config or Config()
    name = normalize_provider(provider)

    if config.use_mock:
        from llmgate.providers.mock import MockProvider

        log.debug("Using mock provider for %s", name)
        return MockProvider(name)

    credentials = resolve_credentials(name, env=config.environ())
    log.debug("Resolved provider=%s base_url=%s", name, credentials.base_url or "default")
    return PROVIDER_CLASSES[name](credentials.api_key, base_url=credentials.base_url)

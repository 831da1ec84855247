"""Configuration: frozen Config plus provider naming."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import TYPE_CHECKING, Literal, cast

from dotenv import load_dotenv

from llmgate.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

load_dotenv()

ProviderName = Literal["openai", "deepseek"]

SUPPORTED_PROVIDERS: tuple[ProviderName, ...] = ("openai", "deepseek")
DEFAULT_PROVIDER: ProviderName = "openai"

DEFAULT_URL_ALLOWLIST: tuple[str, ...] = (
    "example.com",
    "developer.mozilla.org",
    "api.github.com",
)


def normalize_provider(selector: str | None) -> ProviderName:
    """Map an optional provider selector onto a concrete provider name.

    ``None`` (or an empty string) selects the default provider. Selectors are
    case-insensitive so ``"DEEPSEEK"`` and ``"deepseek"`` are equivalent.
    """
    if selector is None or not str(selector).strip():
        return DEFAULT_PROVIDER
    name = str(selector).strip().lower()
    if name not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"Unknown provider: {selector!r}",
            hint=f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}",
        )
    return cast("ProviderName", name)


@dataclass(frozen=True)
class Config:
    """Immutable configuration for llmgate operations.

    Credentials are not stored here; they are resolved from ``env`` on every
    call so nothing secret outlives a single request.

    Example:
        config = Config()  # reads OPENAI_API_KEY / DEEPSEEK_API_KEY per call
        config = Config(env={"OPENAI_API_KEY": "sk-..."}, agent_max_steps=3)
    """

    #: Environment mapping used for credential lookup. *None* means the live
    #: ``os.environ`` at call time.
    env: Mapping[str, str] | None = field(default=None, repr=False)
    use_mock: bool = False
    agent_max_steps: int = 2
    agent_temperature: float = 0.3
    default_url_allowlist: tuple[str, ...] = DEFAULT_URL_ALLOWLIST

    def __post_init__(self) -> None:
        """Validate configuration eagerly for clear errors."""
        if self.agent_max_steps < 1:
            raise ConfigurationError(
                f"agent_max_steps must be ≥ 1, got {self.agent_max_steps}",
                hint="This bounds how many model turns one agent run may take.",
            )
        if not isinstance(self.default_url_allowlist, tuple):
            object.__setattr__(
                self, "default_url_allowlist", tuple(self.default_url_allowlist)
            )

    def environ(self) -> Mapping[str, str]:
        """Return the mapping credentials are resolved from."""
        return os.environ if self.env is None else self.env

    def __str__(self) -> str:
        """Return a developer-friendly representation without secrets."""
        return (
            f"Config(env={'<custom>' if self.env is not None else '<os.environ>'}, "
            f"use_mock={self.use_mock}, agent_max_steps={self.agent_max_steps}, "
            f"agent_temperature={self.agent_temperature})"
        )

    __repr__ = __str__

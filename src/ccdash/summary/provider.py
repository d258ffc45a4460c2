"""Summary provider — pydantic-ai backed text generation for file summaries.

Chooses one backend from the configured credentials (Anthropic before OpenAI),
builds its pydantic-ai Agent once, and turns every failure into ProviderError.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from ccdash.diagnostics import LogManager
from ccdash.summary.config import ANTHROPIC_KEY_VAR, OPENAI_KEY_VAR, SummaryConfig
from ccdash.summary.models import Backend, ProviderStatus
from ccdash.summary.prompts import SYSTEM_PROMPT, build_prompt

SOURCE = "summary"

# DI type — builds the pydantic-ai model for a backend
ModelFactory = Callable[[Backend, SummaryConfig], Model]


class ProviderError(Exception):
    """Summary generation failed."""

    def __init__(self, message: str, backend: Backend = Backend.NONE) -> None:
        """Initialize ProviderError with a message and the backend involved."""
        self.message = message
        self.backend = backend
        super().__init__(message)


def build_model(backend: Backend, config: SummaryConfig) -> Model:
    """Build a pydantic-ai model with an explicit API key for *backend*.

    Raises:
        ValueError: If the backend has no credential configured
        ImportError: If the backend's client library is not installed
    """
    if backend == Backend.ANTHROPIC and config.anthropic_api_key is not None:
        from pydantic_ai.models.anthropic import AnthropicModel
        from pydantic_ai.providers.anthropic import AnthropicProvider

        return AnthropicModel(
            config.anthropic_model,
            provider=AnthropicProvider(api_key=config.anthropic_api_key.get_secret_value()),
        )

    if backend == Backend.OPENAI and config.openai_api_key is not None:
        from pydantic_ai.models.openai import OpenAIChatModel
        from pydantic_ai.providers.openai import OpenAIProvider

        return OpenAIChatModel(
            config.openai_model,
            provider=OpenAIProvider(api_key=config.openai_api_key.get_secret_value()),
        )

    msg = f"No credential configured for backend {backend.value!r}"
    raise ValueError(msg)


class SummaryProvider:
    """Generates short technical summaries through the selected backend.

    Example:
        provider = SummaryProvider(SummaryConfig.from_env(), log)
        if provider.is_configured:
            text = await provider.summarize(content, "skill")
    """

    def __init__(
        self,
        config: SummaryConfig,
        log: LogManager,
        model_factory: ModelFactory = build_model,
    ) -> None:
        """Initialize provider.

        Args:
            config: Credentials, model names and request budgets
            log: Diagnostic channel for failures
            model_factory: Builds the pydantic-ai model (tests pass TestModel/FunctionModel)
        """
        self.config = config
        self._log = log
        self._model_factory = model_factory
        self._backend: Backend | None = None
        self._agents: dict[Backend, Agent[None, str]] = {}

    def select_backend(self) -> Backend:
        """Return the backend to use; Anthropic wins whenever its key is set."""
        if self._backend is None:
            if self.config.anthropic_api_key is not None:
                self._backend = Backend.ANTHROPIC
            elif self.config.openai_api_key is not None:
                self._backend = Backend.OPENAI
            else:
                self._backend = Backend.NONE
        return self._backend

    @property
    def is_configured(self) -> bool:
        return self.select_backend() != Backend.NONE

    def status(self) -> ProviderStatus:
        """Describe the active backend, or how to configure one."""
        backend = self.select_backend()
        if backend == Backend.ANTHROPIC:
            description = f"Claude AI ({self.config.anthropic_model})"
        elif backend == Backend.OPENAI:
            description = f"OpenAI ({self.config.openai_model})"
        else:
            description = f"Set {ANTHROPIC_KEY_VAR} or {OPENAI_KEY_VAR} for AI summaries"
        return ProviderStatus(provider=backend, description=description)

    def reset(self) -> None:
        """Forget the memoized backend choice and agents. Intended for tests."""
        self._backend = None
        self._agents = {}

    def _model_settings(self, backend: Backend) -> ModelSettings:
        settings = ModelSettings(
            max_tokens=self.config.max_output_tokens,
            timeout=self.config.timeout_seconds,
        )
        if backend == Backend.OPENAI:
            settings["temperature"] = self.config.temperature
        return settings

    def _agent(self, backend: Backend) -> Agent[None, str]:
        agent = self._agents.get(backend)
        if agent is None:
            try:
                model = self._model_factory(backend, self.config)
            except Exception as e:
                msg = f"Failed to initialize {backend.value} client: {e}"
                self._log.error(SOURCE, msg)
                raise ProviderError(msg, backend) from e
            agent = Agent(
                model,
                output_type=str,
                system_prompt=SYSTEM_PROMPT,
                model_settings=self._model_settings(backend),
            )
            self._agents[backend] = agent
        return agent

    async def summarize(self, content: str, item_type: str) -> str:
        """Generate a summary of *content* for an item of kind *item_type*.

        Args:
            content: Raw file text (truncated to max_content_chars before sending)
            item_type: Label such as "skill", "agent", "hook"

        Returns:
            Stripped, non-empty summary text

        Raises:
            ProviderError: No backend, client construction failure, request
                failure or timeout, or an empty response
        """
        backend = self.select_backend()
        if backend == Backend.NONE:
            msg = "No summary backend configured"
            self._log.error(SOURCE, msg)
            raise ProviderError(msg, backend)

        agent = self._agent(backend)
        prompt = build_prompt(content, item_type, self.config.max_content_chars)

        start = time.monotonic()
        try:
            result = await agent.run(prompt)
            text = result.output.strip()
            # a method on pydantic-ai 1.x run results
            usage = result.usage() if callable(result.usage) else result.usage
            input_tokens = usage.input_tokens or 0
            output_tokens = usage.output_tokens or 0
        except Exception as e:
            msg = f"{backend.value} request failed: {e}"
            self._log.error(SOURCE, msg, {"error_type": type(e).__name__})
            raise ProviderError(msg, backend) from e
        duration_ms = int((time.monotonic() - start) * 1000)

        if not text:
            msg = f"{backend.value} returned an empty summary"
            self._log.error(SOURCE, msg)
            raise ProviderError(msg, backend)

        self._log.debug(
            SOURCE,
            f"Generated {item_type} summary via {backend.value}",
            {
                "duration_ms": duration_ms,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            },
        )
        return text

"""Summary engine configuration.

Uses BaseModel (not BaseSettings): the environment is read once at startup by
SummaryConfig.from_env() and the resulting object is injected everywhere else.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ccdash import paths

ANTHROPIC_KEY_VAR = "ANTHROPIC_API_KEY"
OPENAI_KEY_VAR = "OPENAI_API_KEY"
HOME_VAR = "CCDASH_HOME"


class SummaryConfig(BaseModel):
    """Credentials, model choices and request budgets for summarization."""

    anthropic_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    anthropic_model: str = "claude-haiku-4-5"
    openai_model: str = "gpt-4.1-mini"
    max_output_tokens: int = 400
    temperature: float = 0.3
    timeout_seconds: float = 30.0
    max_content_chars: int = 4000
    preview_lines: int = 30
    data_dir: Path = Field(default_factory=paths.home_dir)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SummaryConfig:
        """Build config from environment variables.

        Blank credential values count as unset.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ

        def secret(name: str) -> SecretStr | None:
            value = env.get(name, "").strip()
            return SecretStr(value) if value else None

        kwargs: dict[str, object] = {
            "anthropic_api_key": secret(ANTHROPIC_KEY_VAR),
            "openai_api_key": secret(OPENAI_KEY_VAR),
        }
        home = env.get(HOME_VAR, "").strip()
        if home:
            kwargs["data_dir"] = Path(home).expanduser()
        return cls.model_validate(kwargs)

    @property
    def cache_file(self) -> Path:
        return paths.cache_file(self.data_dir)

    @property
    def logs_dir(self) -> Path:
        return paths.logs_dir(self.data_dir)

# Config
"""
Configuration for graphweaver.

Settings are read from environment variables (a local .env file is loaded
by the CLI). Each collaborator gets its own closed config model so that
options are explicit rather than passed around as loose dicts.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Collaborator configs
# =============================================================================


class GeneratorConfig(BaseModel):
    """Options for the language-model draft generator."""

    model_config = ConfigDict(frozen=True)

    model: str = Field("gpt-4o-mini", description="Chat completion model name")
    temperature: float = Field(0.1, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(4096, ge=1, description="Completion token limit")
    api_key: Optional[str] = Field(None, description="API key, falls back to OPENAI_API_KEY")
    base_url: Optional[str] = Field(None, description="Alternative OpenAI-compatible endpoint")


class RetryConfig(BaseModel):
    """Options for the generate/validate/retry loop."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(3, ge=1, description="Generation attempts before giving up")


class SearchConfig(BaseModel):
    """Options for candidate search."""

    model_config = ConfigDict(frozen=True)

    strategy: Literal["occurrence", "index"] = Field(
        "occurrence",
        description="occurrence: literal containment counts; index: BM25 ranked index",
    )
    limit: int = Field(10, ge=1, description="Maximum hits per response")


class ResolverConfig(BaseModel):
    """Options for batch entity resolution."""

    model_config = ConfigDict(frozen=True)

    query_field: Literal["text", "name"] = Field(
        "text",
        description="Variable field used as the search query",
    )
    max_concurrency: Optional[int] = Field(
        None,
        ge=1,
        description="Upper bound on in-flight searches, unbounded when None",
    )


class MintConfig(BaseModel):
    """Options for minting identifiers of previously unseen entities."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(True, description="Mint a new IRI when search has no hits")
    base: str = Field(
        "https://example.org/.well-known/genid/",
        description="Namespace prefix for minted IRIs",
    )


# =============================================================================
# Settings
# =============================================================================


class Settings:
    def __init__(self) -> None:
        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file_path = os.getenv("LOG_FILE_PATH")
        self.dev_mode = _env_bool("DEV_MODE")

        # Language model
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.openai_base_url = os.getenv("OPENAI_BASE_URL")
        self.model = os.getenv("GRAPHWEAVER_MODEL", "gpt-4o-mini")
        self.temperature = float(os.getenv("GRAPHWEAVER_TEMPERATURE", "0.1"))

        # Retry loop
        self.max_attempts = int(os.getenv("GRAPHWEAVER_MAX_ATTEMPTS", "3"))

        # Search
        self.search_strategy = os.getenv("GRAPHWEAVER_SEARCH_STRATEGY", "occurrence")
        self.search_limit = int(os.getenv("GRAPHWEAVER_SEARCH_LIMIT", "10"))

        # Identifier minting
        self.genid_base = os.getenv(
            "GRAPHWEAVER_GENID_BASE", "https://example.org/.well-known/genid/"
        )

        # Storage
        self.store_path = Path(os.getenv("GRAPHWEAVER_STORE_PATH", "db.ttl"))

    def get_log_file_path(self) -> Optional[Path]:
        if not self.log_file_path:
            return None
        path = Path(self.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(
            model=self.model,
            temperature=self.temperature,
            api_key=self.openai_api_key,
            base_url=self.openai_base_url,
        )

    def retry_config(self) -> RetryConfig:
        return RetryConfig(max_attempts=self.max_attempts)

    def search_config(self) -> SearchConfig:
        return SearchConfig(strategy=self.search_strategy, limit=self.search_limit)

    def resolver_config(self) -> ResolverConfig:
        return ResolverConfig()

    def mint_config(self) -> MintConfig:
        return MintConfig(base=self.genid_base)


# Singleton instance
_settings = None


def get_settings():
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

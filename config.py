from __future__ import annotations

from dataclasses import dataclass
import logging
import os

_TRUE_VALUES = {"1", "true", "yes", "on"}
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_str(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_bool(name: str, default: bool) -> bool:
    value = (os.getenv(name) or "").strip().lower()
    if not value:
        return default
    return value in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = (os.getenv(name) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = (os.getenv(name) or "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    log_level: str = "INFO"
    max_body_chars: int = 200_000
    max_html_chars: int = 500_000
    freeform_enabled: bool = True
    llm_fallback_enabled: bool = False
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.0
    openai_max_output_tokens: int = 4000

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            max_body_chars=_env_int("PARSER_MAX_BODY_CHARS", 200_000),
            max_html_chars=_env_int("PARSER_MAX_HTML_CHARS", 500_000),
            freeform_enabled=_env_bool("PARSER_FREEFORM_ENABLED", True),
            llm_fallback_enabled=_env_bool("PARSER_LLM_FALLBACK_ENABLED", False),
            openai_api_key=_env_str("OPENAI_API_KEY", ""),
            openai_model=_env_str("OPENAI_MODEL", "gpt-4o-mini"),
            openai_temperature=_env_float("OPENAI_TEMPERATURE", 0.0),
            openai_max_output_tokens=_env_int("OPENAI_MAX_OUTPUT_TOKENS", 4000),
        )

    @property
    def llm_available(self) -> bool:
        return self.llm_fallback_enabled and bool(self.openai_api_key)


def configure_logging(config: Config) -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    level = getattr(logging, config.log_level, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_LOG_FORMAT)
    root.setLevel(level)

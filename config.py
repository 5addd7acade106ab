"""
Scripture Study - Configuration

Centralized configuration management for the study engine.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum

from dotenv import load_dotenv

from core.errors import StudyConfigError

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


# Primary translations in request order: code -> display label
DEFAULT_TRANSLATIONS: Dict[str, str] = {
    "kjv": "King James Version",
    "asv": "American Standard Version",
    "web": "World English Bible",
}


def _translation_codes() -> List[str]:
    raw = os.getenv("STUDY_TRANSLATIONS", "")
    if not raw.strip():
        return list(DEFAULT_TRANSLATIONS)
    return [code.strip().lower() for code in raw.split(",") if code.strip()]


@dataclass
class ProviderConfig:
    """Upstream provider endpoints and transport settings."""
    bible_api_url: str = field(
        default_factory=lambda: os.getenv("BIBLE_API_URL", "https://bible-api.com")
    )
    chapter_cdn_url: str = field(
        default_factory=lambda: os.getenv(
            "CHAPTER_CDN_URL",
            "https://cdn.jsdelivr.net/gh/wldeh/bible-api/bibles",
        )
    )
    chapter_cdn_edition: str = field(
        default_factory=lambda: os.getenv("CHAPTER_CDN_EDITION", "en-kjv")
    )
    commentary_api_url: str = field(
        default_factory=lambda: os.getenv("COMMENTARY_API_URL", "https://api.getcontext.xyz/v0.9")
    )
    request_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10"))
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("PROVIDER_USER_AGENT", "scripture-study/1.0")
    )


@dataclass
class CacheConfig:
    """Shared response cache settings."""
    ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("CACHE_TTL_SECONDS", "3600"))
    )
    max_entries: int = field(
        default_factory=lambda: int(os.getenv("CACHE_MAX_ENTRIES", "5000"))
    )
    sweep_interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", "300"))
    )

    def __post_init__(self) -> None:
        for key, value in (
            ("ttl_seconds", self.ttl_seconds),
            ("sweep_interval_seconds", self.sweep_interval_seconds),
        ):
            if value <= 0:
                raise StudyConfigError(
                    f"cache.{key} must be > 0",
                    config_key=f"cache.{key}",
                    actual_value=value,
                )
        if self.max_entries < 1:
            raise StudyConfigError(
                "cache.max_entries must be >= 1",
                config_key="cache.max_entries",
                actual_value=self.max_entries,
            )


@dataclass
class StudyConfig:
    """Aggregation behaviour."""
    translations: List[str] = field(default_factory=_translation_codes)
    translation_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TRANSLATIONS))
    fallback_translation: str = field(
        default_factory=lambda: os.getenv("STUDY_FALLBACK_TRANSLATION", "kjv")
    )

    def label_for(self, code: str) -> str:
        """Display label for a translation code."""
        return self.translation_labels.get(code, code.upper())


@dataclass
class ObservabilityConfig:
    """
    Logging and OpenTelemetry tracing configuration.

    Tracing is off unless OTEL_TRACING_ENABLED is set; spans are still
    created through the API and become no-ops.
    """
    service_name: str = field(
        default_factory=lambda: os.getenv("OTEL_SERVICE_NAME", "scripture-study")
    )
    service_version: str = field(
        default_factory=lambda: os.getenv("OTEL_SERVICE_VERSION", "1.0.0")
    )
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    tracing_enabled: bool = field(
        default_factory=lambda: os.getenv("OTEL_TRACING_ENABLED", "false").lower() == "true"
    )
    sample_rate: float = field(
        default_factory=lambda: float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )
    log_json_format: bool = field(
        default_factory=lambda: os.getenv("LOG_FORMAT", "console").lower() == "json"
    )
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development")
    )

    def get_sample_rate_for_env(self) -> float:
        """Get appropriate sample rate based on environment."""
        env = self.environment.lower()
        if env == "production":
            return min(self.sample_rate, 0.1)
        elif env == "staging":
            return min(self.sample_rate, 0.5)
        else:
            return self.sample_rate

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "service_name": self.service_name,
            "service_version": self.service_version,
            "otlp_endpoint": self.otlp_endpoint,
            "tracing_enabled": self.tracing_enabled,
            "sample_rate": self.get_sample_rate_for_env(),
            "environment": self.environment,
        }


@dataclass
class APIConfig:
    """API server configuration."""
    host: str = field(default_factory=lambda: os.getenv("API_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8000")))
    reload: bool = field(default_factory=lambda: os.getenv("API_RELOAD", "false").lower() == "true")
    cors_origins: List[str] = field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*").split(","))


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    providers: ProviderConfig = field(default_factory=ProviderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    study: StudyConfig = field(default_factory=StudyConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "providers": {
                "bible_api_url": self.providers.bible_api_url,
                "chapter_cdn_url": self.providers.chapter_cdn_url,
                "commentary_api_url": self.providers.commentary_api_url,
                "request_timeout_seconds": self.providers.request_timeout_seconds,
            },
            "cache": {
                "ttl_seconds": self.cache.ttl_seconds,
                "max_entries": self.cache.max_entries,
            },
            "study": {
                "translations": self.study.translations,
                "fallback_translation": self.study.fallback_translation,
            },
            "observability": self.observability.to_dict(),
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config

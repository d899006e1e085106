"""
Configuration Management for TubeScout
Settings classes with environment variable overrides and optional YAML file
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, Literal, List
from functools import lru_cache

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ============================================================================
# Core Configuration Classes
# ============================================================================


class AppConfig(BaseSettings):
    """Application identity and execution mode"""

    model_config = SettingsConfigDict(env_prefix="APP_")

    name: str = Field(default="TubeScout", description="Application name")
    env: Literal["development", "production", "test"] = Field(
        default="production",
        description="Execution mode; controls error message verbosity",
    )

    @property
    def is_development(self) -> bool:
        return self.env == "development"


class APIConfig(BaseSettings):
    """API Server Configuration"""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("API_PORT", "PORT"),
        description="API port",
    )
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="CORS allowed origins (comma-separated)",
    )
    shutdown_grace_seconds: float = Field(
        default=10.0, description="Forced exit delay after a shutdown request"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return v


class LoggingConfig(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file_path: Optional[str] = Field(default=None, description="Log file path")


class YouTubeAPISettings(BaseSettings):
    """YouTube Data API and suggestion endpoint settings"""

    model_config = SettingsConfigDict(env_prefix="YOUTUBE_")

    api_key: str = Field(default="", description="YouTube Data API v3 key")
    base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        description="Data API base URL",
    )
    suggest_url: str = Field(
        default="https://suggestqueries.google.com/complete/search",
        description="Query suggestion endpoint",
    )

    # Request Settings
    max_retries: int = Field(
        default=3, description="Maximum retry attempts for failed requests"
    )
    request_timeout: float = Field(
        default=10.0, description="Request timeout in seconds"
    )
    backoff_base: float = Field(
        default=1.0, description="Retry delay multiplier (seconds * 2**attempt)"
    )

    # Comment Fetching
    comments_page_size: int = Field(
        default=100, description="commentThreads page size (max 100)"
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate API key format"""
        if v and len(v) < 20:
            raise ValueError("YouTube API key appears to be invalid (too short)")
        return v

    @field_validator("comments_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("comments_page_size must be between 1 and 100")
        return v


class SearchSettings(BaseSettings):
    """Search orchestration limits"""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    # Request parameter bounds
    default_suggestion_count: int = Field(default=4)
    max_suggestion_count: int = Field(default=10)
    default_video_count: int = Field(default=15)
    max_video_count: int = Field(default=50)
    max_query_length: int = Field(default=100)
    min_query_length: int = Field(default=2)

    # Fan-out
    results_per_term: int = Field(
        default=3, description="Videos requested from search per term"
    )

    # Enrichment
    comment_limit: int = Field(default=15, description="Comments kept per video")
    comment_batch_size: int = Field(
        default=5, description="Maximum concurrent comment fetches"
    )
    comment_timeout_ms: int = Field(
        default=8000, description="Wall-clock limit for one comment fetch"
    )
    min_comment_length: int = Field(
        default=15, description="Comments at or below this length are skipped"
    )

    @field_validator("comment_batch_size", "comment_timeout_ms", "results_per_term")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Main Application Configuration
    Aggregates all configuration modules with unified access
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize application configuration

        Args:
            config_path: Optional YAML config file path
        """
        self.config_path = config_path or "configs/app.yaml"
        self.yaml_config = self._load_yaml_config()

        self.app = AppConfig()
        self.api = APIConfig()
        self.logging = LoggingConfig()
        self.youtube_api = YouTubeAPISettings()
        self.search = SearchSettings()

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.debug(f"Config file not found: {config_file}, using defaults")
            return {}

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation key"""
        keys = key.split(".")
        value = self.yaml_config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    @property
    def is_development(self) -> bool:
        return self.app.is_development

    def to_dict(self) -> Dict[str, Any]:
        """Export full configuration as dictionary"""
        return {
            "app": self.app.model_dump(),
            "api": self.api.model_dump(),
            "logging": self.logging.model_dump(),
            "youtube_api": self.youtube_api.model_dump(exclude={"api_key"}),
            "search": self.search.model_dump(),
        }

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary"""
        return {
            "app": {"name": self.app.name, "env": self.app.env},
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "debug": self.api.debug,
            },
            "youtube_api": {
                "api_key_set": bool(self.youtube_api.api_key),
                "max_retries": self.youtube_api.max_retries,
                "request_timeout": self.youtube_api.request_timeout,
            },
            "search": {
                "comment_batch_size": self.search.comment_batch_size,
                "comment_timeout_ms": self.search.comment_timeout_ms,
                "comment_limit": self.search.comment_limit,
            },
        }


# ============================================================================
# Global Configuration Instance (Singleton)
# ============================================================================

_config: Optional[Config] = None
_config_lock = threading.Lock()


@lru_cache()
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get or create global configuration instance (Thread-safe singleton)

    Args:
        config_path: Optional path to config file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config(config_path)
                logger.debug("✅ Configuration initialized")

    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """Force reload configuration"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = Config(config_path)
        logger.info("🔄 Configuration reloaded")

    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = None


# ============================================================================
# Configuration Validation
# ============================================================================


def validate_config(config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Validate configuration

    Args:
        config: Config instance (uses global if None)

    Returns:
        Validation result with errors and warnings
    """
    if config is None:
        config = get_config()

    errors = []
    warnings = []

    # Check log path
    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        if not log_path.parent.exists():
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Cannot create log directory: {e}")

    # Check YouTube API key
    if not config.youtube_api.api_key:
        warnings.append("YouTube API key not set - searches will return no videos")

    search = config.search
    if search.default_suggestion_count > search.max_suggestion_count:
        errors.append("default_suggestion_count exceeds max_suggestion_count")
    if not 1 <= search.default_video_count <= search.max_video_count:
        errors.append("default_video_count must be within [1, max_video_count]")
    if search.min_query_length > search.max_query_length:
        errors.append("min_query_length exceeds max_query_length")

    if config.app.env == "development" and not config.api.debug:
        warnings.append("Development mode: error details are exposed in responses")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


# ============================================================================
# Logging
# ============================================================================


def setup_logging(config: Optional[Config] = None) -> None:
    """
    Setup logging based on configuration

    Args:
        config: Config instance (uses global if None)
    """
    import logging.handlers

    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)
    formatter = logging.Formatter(config.logging.format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info(f"📝 Logging configured: level={config.logging.level}")

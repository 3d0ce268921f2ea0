"""Configuration management for Resonance."""

from typing import Optional, Dict, Any, List, Tuple, Type
from pathlib import Path
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
import yaml
import logging

from resonance.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://itunes.apple.com"

# Curated discovery terms; each returns a broad, popular slice of the catalog
DEFAULT_DISCOVERY_KEYWORDS = [
    "Top Hits 2025",
    "Pop Hits",
    "Rock Classics",
    "Hip Hop",
    "Indie Folk",
    "Electronic Dance",
    "R&B Soul",
    "Jazz Essentials",
    "Country Music",
    "Latin Hits",
    "Alternative Rock",
    "Classical Music",
    "Reggae",
    "Metal",
    "K-Pop",
    "French Pop",
    "Acoustic",
    "Chill Vibes",
    "Party Mix",
    "Throwback 90s",
]


class UpstreamConfig(BaseModel):
    """Upstream catalog API configuration."""

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias=AliasChoices("base_url", "baseUrl"),
    )
    timeout: float = 10.0
    default_limit: int = Field(
        default=20,
        ge=1,
        le=200,
        validation_alias=AliasChoices("default_limit", "defaultLimit"),
    )
    country: Optional[str] = None  # storefront, e.g. "US"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("upstream.base_url must not be empty")
        return value.rstrip("/")


class FeedConfig(BaseModel):
    """Discovery feed configuration."""

    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_DISCOVERY_KEYWORDS))
    virtual_total_elements: int = Field(
        default=200,
        ge=0,
        validation_alias=AliasChoices("virtual_total_elements", "virtualTotalElements"),
    )
    max_batch_size: int = Field(
        default=50,
        ge=1,
        le=200,
        validation_alias=AliasChoices("max_batch_size", "maxBatchSize"),
    )

    @field_validator("keywords")
    @classmethod
    def _require_two_keywords(cls, value: List[str]) -> List[str]:
        cleaned: List[str] = []
        for keyword in value:
            keyword = keyword.strip()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        if len(cleaned) < 2:
            raise ValueError("feed.keywords needs at least two distinct entries")
        return cleaned


class StoreConfig(BaseModel):
    """Catalog store configuration."""

    db_path: str = "resonance_catalog.db"
    timeout: float = 30.0  # seconds to wait on a locked database


class ResonanceConfig(BaseSettings):
    """Main Resonance configuration."""

    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    model_config = SettingsConfigDict(
        env_prefix="RESONANCE_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # RESONANCE_* variables override values loaded from the config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_file(cls, config_path: str | Path = "resonance.yaml") -> "ResonanceConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f) or {}

        if not isinstance(config_dict, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")

        upstream_config = config_dict.get("upstream") or {}
        feed_config = config_dict.get("feed") or {}
        store_config = config_dict.get("store") or {}

        try:
            return cls(upstream=upstream_config, feed=feed_config, store=store_config)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "upstream": self.upstream.model_dump(),
            "feed": self.feed.model_dump(),
            "store": self.store.model_dump(),
        }

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False)

    def save(self, path: str | Path = "resonance.yaml") -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            f.write(self.to_yaml())

        logger.info(f"Configuration saved to {path}")


def get_config_value(config: ResonanceConfig, path: str, default: Any = None) -> Any:
    """Get a nested config value using dot notation."""
    keys = path.split(".")
    current = config.model_dump()

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default

    return current

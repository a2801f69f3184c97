"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (LIFECYCLE__CHECK__PRODUCTS=python,nodejs)
  2. lifecycle.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; every field has a default. Invalid
values raise pydantic's ValidationError when Settings() is constructed, before
any network activity.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_REGISTRY_URL = "https://endoflife.date/api"


def _find_config_file() -> str | None:
    """Return the path of the first lifecycle.yaml found, or None."""
    candidates = [
        Path("lifecycle.yaml"),
        Path(platformdirs.user_config_dir("lifecycletracker")) / "lifecycle.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    url: str = DEFAULT_REGISTRY_URL
    timeout_seconds: float = Field(default=30.0, gt=0)


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=3600, ge=0)


class CheckSettings(BaseModel):
    # Raw inputs, parsed and validated by lifecycletracker.inputs
    products: str = ""
    cycles: str = "{}"
    version: str = ""

    eol_threshold_days: int = Field(default=90, ge=0)
    stale_threshold_days: int = Field(default=365, ge=0)
    semantic_version_fallback: bool = True
    on_product_error: Literal["unknown", "omit"] = "unknown"
    fail_on_eol: bool = False
    fail_on_approaching_eol: bool = False


class OutputSettings(BaseModel):
    # "step-outputs" prints CI step outputs in the $GITHUB_OUTPUT heredoc format
    format: Literal["json", "step-outputs"] = "json"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LIFECYCLE__CACHE__TTL_SECONDS=600
        env_prefix="LIFECYCLE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    registry: RegistrySettings = RegistrySettings()
    cache: CacheSettings = CacheSettings()
    check: CheckSettings = CheckSettings()
    output: OutputSettings = OutputSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )

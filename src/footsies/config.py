"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from footsies.models.skills import DEFAULT_SKILLS


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'storage' in data:
            flattened['data_dir'] = data['storage'].get('data_dir')
        if 'skills' in data:
            flattened['skills'] = data['skills']
        if 'progression' in data:
            progression = data['progression']
            flattened['threshold_growth'] = progression.get('threshold_growth')
            flattened['threshold_step'] = progression.get('threshold_step')
            flattened['threshold_base'] = progression.get('threshold_base')
            flattened['initial_threshold'] = progression.get('initial_threshold')
        if 'sessions' in data:
            sessions = data['sessions']
            flattened['dedup_window_seconds'] = sessions.get('dedup_window_seconds')
            flattened['clear_session_on_failure'] = sessions.get('clear_on_failure')
        if 'recommendations' in data:
            flattened['recommended_sessions_per_week'] = (
                data['recommendations'].get('sessions_per_week')
            )

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FOOTSIES_",
        extra="ignore",
    )

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Skill registry
    skills: list[str] = Field(default_factory=lambda: list(DEFAULT_SKILLS))

    # Progression
    threshold_growth: Literal["flat", "formula"] = Field(default="flat")
    threshold_step: int = Field(default=20, gt=0)
    threshold_base: int = Field(default=100, gt=0)
    initial_threshold: int = Field(default=100, gt=0)

    # Sessions
    dedup_window_seconds: float = Field(default=5.0, ge=0)
    clear_session_on_failure: bool = Field(default=False)

    # Recommendations
    recommended_sessions_per_week: float = Field(default=3.0, gt=0)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)
    data_dir: Path | None = Field(default=None)

    @property
    def storage_dir(self) -> Path:
        d = self.data_dir or self.project_root / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()

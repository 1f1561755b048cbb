from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppConfig(BaseSettings):
    """
    Configuration model for mneme.
    Supports loading from:
    1. Environment variables (MNEME_*)
    2. Config file (~/.config/mneme/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEME_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/mneme")
    progress_file: Path | None = None
    settings_file: Path | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Looked up at call time so tests can redirect HOME
        toml_file = Path.home() / ".config/mneme/config.toml"

        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("data_dir", "progress_file", "settings_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/mneme/config.toml (if exists)
    3. Environment variables (MNEME_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not give
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = AppConfig(**overrides)

    if config.progress_file is None:
        config.progress_file = config.data_dir / "progress.json"

    if config.settings_file is None:
        config.settings_file = config.data_dir / "settings.yaml"

    return config

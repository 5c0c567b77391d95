"""Runtime settings — env-driven via pydantic-settings.

Reads from a .env file and TOOLSTREAM_* environment variables. Command-line
options override these per run.
"""

from __future__ import annotations

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from toolstream.models.config import GenerateConfig
from toolstream.models.tools import ToolsFilter


class GeneratorSettings(BaseSettings):
    """Settings for the tools metadata generator.

    Examples
    --------
    Override via environment::

        export TOOLSTREAM_STORAGE_URL=http://storage.example.com/env-1
        export TOOLSTREAM_PUBLIC_STORAGE_URL=https://tools.example.com
        export TOOLSTREAM_LOG_LEVEL=DEBUG

    Or via .env file::

        TOOLSTREAM_ENVIRONMENT_NAME=staging
        TOOLSTREAM_FETCH=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TOOLSTREAM_",
        env_file_encoding="utf-8",
    )

    environment_name: str = "default"
    log_level: str = "INFO"

    # Environment storages
    storage_url: str = ""
    public_storage_url: str = ""
    http_timeout: float = 60.0

    # Generation defaults
    major_version: int = 1
    fetch: bool = True
    output_directory: str = ""

    def to_generate_config(self, **overrides: Any) -> GenerateConfig:
        """Build the per-run config, letting non-None *overrides* win."""
        values: dict[str, Any] = {
            "major_version": self.major_version,
            "fetch": self.fetch,
            "output_directory": self.output_directory,
            "tools_filter": ToolsFilter(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return GenerateConfig(**values)
